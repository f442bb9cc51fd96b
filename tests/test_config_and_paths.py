import os
import time
from pathlib import Path

import pytest

from config_utils import get_api_key, get_default_folders, get_float, get_folders, get_int, load_config
from path_utils import (
    extract_app_id,
    find_files_recursive,
    is_achievement_file,
    is_older_than_days,
    safe_write,
)


def test_load_config_writes_default_when_missing(tmp_path, monkeypatch):
    for var in ('PUBLIC', 'APPDATA', 'PROGRAMDATA', 'LOCALAPPDATA'):
        monkeypatch.setenv(var, str(tmp_path / var.lower()))
    config_path = tmp_path / 'config.ini'
    config = load_config(config_path)

    assert config_path.exists()
    assert get_api_key(config) == ''
    assert len(get_folders(config)) == 10

    # the written file can be read back
    reloaded = load_config(config_path)
    assert get_folders(reloaded) == get_folders(config)
    assert get_int(reloaded, 'watcher', 'max_notify_achievements', 0) == 2


def test_default_folders_skip_unset_variables(monkeypatch):
    for var in ('PUBLIC', 'APPDATA', 'PROGRAMDATA', 'LOCALAPPDATA'):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv('APPDATA', '/roaming')
    assert get_default_folders() == [
        str(Path('/roaming/Empress')),
        str(Path('/roaming/Steam/CODEX')),
        str(Path('/roaming/SmartSteamEmu')),
        str(Path('/roaming/CreamAPI')),
    ]


def test_load_config_requires_sections(tmp_path):
    config_path = tmp_path / 'config.ini'
    config_path.write_text("[paths]\ncache_dir = cache\n")
    with pytest.raises(ValueError, match="must contain"):
        load_config(config_path)


def test_folders_are_read_one_per_line(tmp_path):
    config_path = tmp_path / 'config.ini'
    config_path.write_text(
        "[steam]\napi_key = ABC \n"
        "[watcher]\nfolders =\n    /games/codex\n    /games/rune\n"
        "debounce_seconds = fast\n"
    )
    config = load_config(config_path)
    assert get_api_key(config) == 'ABC'
    assert get_folders(config) == [Path('/games/codex'), Path('/games/rune')]
    assert get_float(config, 'watcher', 'debounce_seconds', 0.1) == 0.1


def test_find_files_recursive_matches_known_names(write_file, tmp_path):
    a = write_file('CODEX/100/achievements.ini', '')
    b = write_file('RUNE/200/stats/Achievements.INI', '')
    write_file('RUNE/200/stats/settings.ini', '')
    c = write_file('Empress/300/remote/achiev.ini', '')

    assert find_files_recursive(tmp_path) == sorted([a, b, c])


def test_is_achievement_file():
    assert is_achievement_file('/x/1/achievements.json')
    assert is_achievement_file('C:/x/1/ACHIEVEMENTS.INI')
    assert not is_achievement_file('/x/1/stats.ini')


@pytest.mark.parametrize('path, expected', [
    (os.path.join('games', 'CODEX', '1245620', 'achievements.ini'), '1245620'),
    (os.path.join('games', '480', '1245620', 'achievements.ini'), '480'),
    (os.path.join('games', 'CODEX', 'achievements.ini'), ''),
])
def test_extract_app_id(path, expected):
    assert extract_app_id(path) == expected


def test_is_older_than_days(tmp_path):
    path = tmp_path / 'f.json'
    assert safe_write(path, '{}')
    assert not is_older_than_days(path, 1)

    old = time.time() - 3 * 24 * 60 * 60
    os.utime(path, (old, old))
    assert is_older_than_days(path, 2)


def test_saved_config_indents_folder_lines(tmp_path, monkeypatch):
    monkeypatch.setenv('APPDATA', str(tmp_path / 'roaming'))
    config_path = tmp_path / 'config.ini'
    load_config(config_path)

    text = config_path.read_text(encoding='utf-8')
    assert "[watcher]" in text
    assert f"\n\t{tmp_path / 'roaming' / 'Empress'}\n" in text
