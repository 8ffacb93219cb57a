import logging
import logging.handlers
import sys
from pathlib import Path

from expense_tracker import config

APP_LOGGER_NAME = "expense_tracker"
LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

# Noisy at INFO; kept at THIRD_PARTY_LOG_LEVEL
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "alembic", "uvicorn.access", "urllib3")


def setup_logging() -> logging.Logger:
    """
    Attach handlers to the "expense_tracker" logger.

    Levels and the optional log file come from APP_LOG_LEVEL,
    THIRD_PARTY_LOG_LEVEL and LOG_FILE. Safe to call more than once.
    """
    level = logging.getLevelName(config.APP_LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(level)
    app_logger.handlers.clear()
    app_logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    handlers = [logging.StreamHandler(sys.stdout)]
    if config.LOG_FILE:
        Path(config.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(config.LOG_FILE, maxBytes=5_000_000, backupCount=3))
    for handler in handlers:
        handler.setFormatter(formatter)
        app_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(config.THIRD_PARTY_LOG_LEVEL.upper())

    return app_logger


def get_logger(name: str = APP_LOGGER_NAME) -> logging.Logger:
    """Module loggers hang off the app logger so setup_logging covers them."""
    if name == APP_LOGGER_NAME or name.startswith(f"{APP_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{APP_LOGGER_NAME}.{name}")
