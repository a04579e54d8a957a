"""Logging setup for the scoring worker and maintenance scripts.

Library code only ever calls ``logging.getLogger(__name__)``; handlers are
attached here, once, by whichever process entry point runs first.
"""
import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from config.settings import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

# Per-statement SQL echo and per-run scheduler chatter
QUIET_LOGGERS = ("sqlalchemy.engine", "apscheduler.scheduler", "apscheduler.executors")


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Configure the root logger for this process.

    Repeated calls leave existing handlers alone but still apply the level,
    so a script can raise verbosity after the worker module was imported.

    Args:
        level: Log level name (defaults to settings.log_level)
        log_file: Rotating log file path (defaults to settings.log_file)

    Returns:
        The ``jobboard`` package logger
    """
    level = (level or settings.log_level).upper()
    log_file = log_file or settings.log_file

    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))

    if not root.handlers:
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        console = logging.StreamHandler()
        console.setFormatter(formatter)
        root.addHandler(console)

        if log_file:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                path,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
            )
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger("jobboard")
