import os
import logging
import logging.handlers
from config.app_config import AppConfig

# Chatty third-party loggers capped at WARNING unless LOG_LEVEL is DEBUG
NOISY_LOGGERS = ('werkzeug', 'websockets', 'urllib3', 'peewee')


def setup_logging(log_file: str = None):
    """
    Configure the root logger for the server and the polling observer

    Args:
        log_file: Rotating log file path; defaults to AppConfig.LOG_FILE.
            An empty value disables file logging.
    """
    if log_file is None:
        log_file = AppConfig.LOG_FILE

    level = AppConfig.get_log_level()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = []

    formatter = logging.Formatter(
        AppConfig.LOG_FORMAT,
        datefmt=AppConfig.LOG_DATE_FORMAT
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.warning(f"Could not create file handler: {e}")

    if level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info(f"Logging configured (level={AppConfig.LOG_LEVEL}, "
                     f"file={log_file or 'disabled'})")
