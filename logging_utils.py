# logging_utils.py
import logging
import sys
from pathlib import Path
from logging.handlers import TimedRotatingFileHandler

# 依存関係: path_utilsから定数をインポート
from path_utils import LOG_DIR, LOG_FILE_NAME

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(log_dir=LOG_DIR, level=logging.INFO):
    """
    Sets up the root logger with a daily rotating file and stdout.
    Returns the path of the log file.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_filename = log_dir / LOG_FILE_NAME

    rotating_handler = TimedRotatingFileHandler(
        log_filename,
        when='D',           # 'D' = 毎日 (Daily)
        interval=1,         # 1日ごと
        backupCount=7,      # 7世代分のバックアップを保持
        encoding='utf-8'
    )

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            rotating_handler,
            logging.StreamHandler(sys.stdout)
        ],
        force=True
    )
    return log_filename


def get_logger(name):
    """Get a logger with the specified name"""
    return logging.getLogger(name)


def set_log_level(level):
    """Set global log level"""
    logging.getLogger().setLevel(level)
