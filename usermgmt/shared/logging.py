"""Logging configuration for the application."""

import logging
import sys

from usermgmt.core.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(settings: Settings | None = None) -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO. Output goes
    to stdout. SQL statements are logged in development (or when
    database_echo is set); elsewhere the SQLAlchemy engine only logs errors.
    """
    settings = settings or get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    sql_level = (
        logging.INFO
        if settings.is_development or settings.database_echo
        else logging.ERROR
    )
    logging.getLogger("sqlalchemy.engine").setLevel(sql_level)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name.

    Args:
        name: Usually __name__ of the calling module.
    """
    return logging.getLogger(name)
