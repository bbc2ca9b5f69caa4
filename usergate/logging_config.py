"""Logging setup for the API process."""

import logging
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure the root logger with a console handler and an optional rotating file."""
    root = logging.getLogger()
    root.setLevel(level.upper())

    # Replace our own handlers when the app is started more than once (tests, reload)
    for handler in [h for h in root.handlers if getattr(h, "_usergate", False)]:
        root.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    console._usergate = True
    root.addHandler(console)

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=3,
        )
        file_handler.setFormatter(formatter)
        file_handler._usergate = True
        root.addHandler(file_handler)

    logging.getLogger(__name__).info(f"Logging configured at level {level.upper()}")
