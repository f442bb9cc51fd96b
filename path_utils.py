# path_utils.py
import os
import time
from pathlib import Path

# グローバル定数
LOG_DIR = Path('logs')
LOG_FILE_NAME = 'achievement_watcher.log'

# 監視対象となる実績ファイル名
ACHIEVEMENT_FILES = (
    'achievements.ini',
    'achievements.json',
    'achiev.ini',
    'Achievements.ini',
)


def safe_write(path, content):
    """Safely writes content to a file, creating directories if necessary."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        return True
    except IOError as e:
        # ロガーは他のモジュールに依存するため、ここでは簡略化
        print(f"ERROR: Could not write file {path}: {e}")
        return False


def ensure_directory(path):
    """Ensures the directory exists."""
    Path(path).mkdir(parents=True, exist_ok=True)


def is_achievement_file(path, match_files=ACHIEVEMENT_FILES):
    """True when the path ends with one of the known achievement file names."""
    lower_path = str(path).lower()
    return any(lower_path.endswith(name.lower()) for name in match_files)


def find_files_recursive(folder, match_files=ACHIEVEMENT_FILES):
    """Returns every regular file below folder whose name matches match_files."""
    results = []
    for root, _dirs, files in os.walk(folder):
        for name in files:
            path = Path(root) / name
            if is_achievement_file(path, match_files):
                results.append(path)
    return sorted(results)


def extract_app_id(path):
    """
    Returns the first all-digit component of the path, which emulators use
    as the Steam app id directory (e.g. .../CODEX/1245620/achievements.ini).
    """
    for part in Path(path).parts:
        if part.isdigit():
            return part
    return ''


def is_older_than_days(path, days):
    """Checks whether the file was last modified more than `days` days ago."""
    mtime = Path(path).stat().st_mtime
    return (time.time() - mtime) > days * 24 * 60 * 60
