import logging
import os

from .config import LOG_LEVEL, LOG_PATH


def configure_logging(
    level: str = LOG_LEVEL, file_path: str | None = LOG_PATH, file_name: str = "tracker.log"
) -> logging.Logger:
    log_formatter = logging.Formatter(
        "%(asctime)s - %(message)s",
    )
    root_logger = logging.getLogger()
    if file_path is not None:
        if not os.path.exists(file_path):
            os.mkdir(file_path)
        file_handler = logging.FileHandler(f"{file_path}/{file_name}")
        file_handler.setFormatter(log_formatter)
        root_logger.addHandler(file_handler)
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(log_formatter)
    root_logger.addHandler(console_handler)
    root_logger.setLevel(level.upper())
    return root_logger
