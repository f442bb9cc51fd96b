# config_utils.py
import configparser
import io
import os
from pathlib import Path

from path_utils import safe_write

REQUIRED_SECTIONS = ('steam', 'watcher')


DEFAULT_FOLDERS = (
    ('PUBLIC', 'Documents', 'Steam', 'CODEX'),
    ('PUBLIC', 'Documents', 'Steam', 'RUNE'),
    ('PUBLIC', 'Documents', 'OnlineFix'),
    ('PUBLIC', 'Documents', 'Empress'),
    ('APPDATA', 'Empress'),
    ('APPDATA', 'Steam', 'CODEX'),
    ('APPDATA', 'SmartSteamEmu'),
    ('APPDATA', 'CreamAPI'),
    ('PROGRAMDATA', 'Steam'),
    ('LOCALAPPDATA', 'skidrow'),
)


def get_default_folders():
    """
    Folders where common Steam emulators keep their achievement files.
    Entries whose environment variable is not set (non-Windows) are skipped.
    """
    folders = []
    for var, *parts in DEFAULT_FOLDERS:
        base = os.environ.get(var)
        if base:
            folders.append(str(Path(base).joinpath(*parts)))
    return folders


def create_default_config():
    config = configparser.ConfigParser(interpolation=None)
    config['steam'] = {'api_key': ''}
    config['watcher'] = {
        'folders': '\n' + '\n'.join(get_default_folders()),
        'debounce_seconds': '0.1',
        'max_notify_achievements': '2',
    }
    config['paths'] = {
        'cache_dir': 'cache',
        'state_file': 'achievement_state.json',
        'log_dir': 'logs',
    }
    return config


def save_config(config, config_path):
    buffer = io.StringIO()
    config.write(buffer)
    return safe_write(config_path, buffer.getvalue())


def load_config(config_path='config.ini'):
    """
    Loads and returns the configuration.
    A default configuration is written first when the file does not exist.
    """
    path = Path(config_path)

    if not path.exists():
        # 設定ファイルが無い場合はデフォルト設定を作成
        config = create_default_config()
        save_config(config, path)
        return config

    config = configparser.ConfigParser(interpolation=None)
    with open(path, 'r', encoding='utf-8-sig') as f:
        config.read_file(f)

    missing = [s for s in REQUIRED_SECTIONS if s not in config]
    if missing:
        raise ValueError(f"Configuration must contain {', '.join(repr(s) for s in REQUIRED_SECTIONS)} sections.")

    return config


def get_api_key(config):
    return config.get('steam', 'api_key', fallback='').strip()


def get_folders(config):
    """Returns the watched folders listed one per line under [watcher] folders."""
    raw = config.get('watcher', 'folders', fallback='')
    return [Path(line.strip()) for line in raw.splitlines() if line.strip()]


def get_float(config, section, key, default):
    try:
        return config.getfloat(section, key, fallback=default)
    except ValueError:
        return default


def get_int(config, section, key, default):
    try:
        return config.getint(section, key, fallback=default)
    except ValueError:
        return default
