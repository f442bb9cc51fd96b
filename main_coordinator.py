# main_coordinator.py
import argparse
import sys
import time
from pathlib import Path
from watchdog.observers import Observer

# --- 枝モジュールからのインポート ---
from config_utils import load_config, get_api_key, get_folders
from logging_utils import configure_logging, get_logger, set_log_level
from state_store import StateStore
from steam_cache import SteamCache
from notification_service import NotificationThrottle
from file_watcher import AchievementProcessor, AchievementFileHandler, process_existing_achievement_files


def build_arg_parser():
    parser = argparse.ArgumentParser(description="Watch emulator achievement files and show unlock notifications.")
    parser.add_argument('--config', default='config.ini', help="path of the INI configuration file")
    parser.add_argument('--log-level', default='INFO', help="root log level (DEBUG, INFO, ...)")
    return parser


def start_observer(config, handler):
    """Schedules every existing configured folder on a new watchdog Observer."""
    logger = get_logger('watcher')
    observer = Observer()
    watched = 0
    for folder in get_folders(config):
        if not folder.exists():
            logger.info(f"Folder does not exist, skipping: {folder}")
            continue
        try:
            observer.schedule(handler, str(folder), recursive=True)
            watched += 1
            logger.info(f"Watching for achievement files in: {folder}")
        except OSError as e:
            logger.error(f"Error adding folder to watcher: {folder}: {e}")
    observer.start()
    return observer, watched


def main(argv=None):
    """全体の実行順序を制御し、依存関係を注入する役割を担う幹の部分"""
    args = build_arg_parser().parse_args(argv)

    # 1. 設定の読み込み
    try:
        config = load_config(args.config)
    except Exception as e:
        configure_logging()
        get_logger('main').error(f"Failed to load configuration: {e}")
        sys.exit(1)

    # 2. ロギングの初期化
    configure_logging(config.get('paths', 'log_dir', fallback='logs'))
    set_log_level(args.log_level.upper())
    logger = get_logger('main')

    api_key = get_api_key(config)
    if not api_key:
        logger.warning("No Steam API key configured; notifications are disabled until [steam] api_key is set.")

    # 3. 依存関係の初期化と注入
    state_store = StateStore(config.get('paths', 'state_file', fallback='achievement_state.json'))
    steam_cache = SteamCache(Path(config.get('paths', 'cache_dir', fallback='cache')), api_key)
    processor = AchievementProcessor(config, state_store, steam_cache, NotificationThrottle())

    # 4. 起動時スキャン
    found = process_existing_achievement_files(config, processor)
    logger.info(f"Found {found} existing achievement files.")

    # 5. ファイル監視の開始
    handler = AchievementFileHandler.from_config(config, processor)
    observer, watched = start_observer(config, handler)
    if not watched:
        logger.warning("None of the configured folders exist; nothing is being watched.")

    logger.info("Press Ctrl+C to stop the watcher")

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Shutdown signal received")
        observer.stop()
        handler.cancel_all()
        observer.join()
        logger.info("Watcher stopped cleanly.")


if __name__ == '__main__':
    main()
