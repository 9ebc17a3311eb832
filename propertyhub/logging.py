"""Logging configuration for the API server and the reconciliation job.

Both write to stdout and to a log file. The level comes from the LOG_LEVEL
environment variable, falling back to the log_level setting (default INFO).
"""

import logging
import os
import sys
from pathlib import Path

from propertyhub.config import settings

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_log_level(level_name: str | None = None) -> int:
    """Resolve a level name to a logging constant.

    Args:
        level_name: Explicit level; LOG_LEVEL and then settings.log_level are
            used when omitted

    Returns:
        Logging level constant (unknown names give INFO)
    """
    level_str = (level_name or os.getenv("LOG_LEVEL") or settings.log_level).upper()
    return LOG_LEVEL_MAP.get(level_str, logging.INFO)


def setup_server_logging(log_file: str = "logs/server.log", level_name: str | None = None) -> None:
    """
    Configure the root logger with a stdout handler and a file handler.

    Args:
        log_file: Path to log file; missing parent directories are created
        level_name: Optional level overriding LOG_LEVEL

    Calling it again replaces the handlers instead of adding duplicates.
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    log_level = get_log_level(level_name)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handlers: list[logging.Handler] = [
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(log_path),
    ]
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    # SQL statements only when echo is on
    if not settings.database_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
