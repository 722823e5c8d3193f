# scrapmarket/config/logging_config.py

"""Per-run logging for scrapmarket.

One file per launch under ``logs/`` (``run_YYYYMMDD_HHMMSS.log``)
receives every ``scrapmarket.*`` record at DEBUG, including the
grouper's per-offer merge decisions. The console only shows warnings
unless ``Settings.DEBUG_LOGGING`` is on.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from scrapmarket.config.settings import Settings

ROOT_LOGGER_NAME = "scrapmarket"

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)
_CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _console_level() -> int:
    return logging.DEBUG if Settings.DEBUG_LOGGING else logging.WARNING


def setup_logging() -> Path:
    """Attach the file and console handlers to the ``scrapmarket`` logger.

    Safe to call more than once: when handlers are already attached the
    logger is left untouched and only a fresh file path is returned.

    Returns:
        Path of the log file for this run.
    """
    Settings.LOGS_DIR.mkdir(parents=True, exist_ok=True)
    log_file = Settings.LOGS_DIR / (
        f"run_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
    )

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)
    if root_logger.handlers:
        log_file.touch(exist_ok=True)
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, _DATE_FORMAT))

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(_console_level())
    console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    root_logger.info(
        "Logging to %s (env=%s, backend=%s)",
        log_file,
        Settings.ENVIRONMENT,
        Settings.API_BASE_URL,
    )
    return log_file
