"""Logging configuration for rotating file + console output."""
import logging
import os
from logging.handlers import RotatingFileHandler

from core.paths import logs_dir

LOG_LEVEL_ENV = "CUEDECK_LOG_LEVEL"


def setup_logging():
    """Configure global logging handlers (idempotent)."""
    log_dir = logs_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "cuedeck.log"

    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=5 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)


def set_debug_logging(enabled):
    """Follow the active profile's debug_log_enabled preference."""
    logging.getLogger().setLevel(logging.DEBUG if enabled else logging.INFO)
