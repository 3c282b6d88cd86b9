"""Logging configuration for the Allocatr API."""

import logging
import sys
from pathlib import Path

# Logs live next to the app package
LOGS_DIR = Path(__file__).parent.parent / "logs"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-24s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

APP_LOGGER_NAME = "allocatr"
FILE_HANDLER_NAME = "allocatr.file"
CONSOLE_HANDLER_NAME = "allocatr.console"


def setup_logging(debug: bool = True) -> logging.Logger:
    """Configure file and console logging for the application.

    Safe to call repeatedly: once the root logger carries our handlers,
    later calls only adjust the console level.
    """
    root_logger = logging.getLogger()
    app_logger = logging.getLogger(APP_LOGGER_NAME)
    console_level = logging.DEBUG if debug else logging.INFO

    installed = {handler.get_name(): handler for handler in root_logger.handlers}
    if CONSOLE_HANDLER_NAME in installed:
        installed[CONSOLE_HANDLER_NAME].setLevel(console_level)
        return app_logger

    LOGS_DIR.mkdir(exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    file_handler = logging.FileHandler(LOGS_DIR / "app.log")
    file_handler.set_name(FILE_HANDLER_NAME)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.set_name(CONSOLE_HANDLER_NAME)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)

    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    # uvicorn keeps its own loggers; point them at ours
    for logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        server_logger = logging.getLogger(logger_name)
        server_logger.handlers = [file_handler, console_handler]
        server_logger.propagate = False

    app_logger.setLevel(logging.DEBUG)
    return app_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(f"{APP_LOGGER_NAME}.{name}")
