"""Logging configuration for the acts API server.

Every record goes to stdout and to a log file. The level comes from the
LOG_LEVEL setting (default INFO); use WARNING in production and DEBUG when
tracing trip selection.
"""

import logging
import os
import sys
from pathlib import Path

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_LEVEL_MAP = {
    name: getattr(logging, name) for name in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
}

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("sqlalchemy.engine", "multipart")


def get_log_level(level_name: str | None = None) -> int:
    """Resolve a level name, falling back to the LOG_LEVEL env var, then INFO."""
    name = (level_name or os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    return LOG_LEVEL_MAP.get(name, logging.INFO)


def setup_server_logging(log_file: str = "logs/server.log", level_name: str | None = None) -> None:
    """
    Route the root logger to stdout and ``log_file``.

    Args:
        log_file: Path to log file; parent directories are created
        level_name: Level name overriding LOG_LEVEL (optional)

    Calling it again replaces the handlers instead of stacking them.
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    level = get_log_level(level_name)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    for handler in (logging.StreamHandler(sys.stdout), logging.FileHandler(log_path, encoding="utf-8")):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


__all__ = ["LOG_LEVEL_MAP", "get_log_level", "setup_server_logging"]
