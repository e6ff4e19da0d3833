"""Logging configuration for rotating file + console output."""
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE_NAME = "config_tool.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _level_from_env():
    name = os.environ.get("NIS_LOG_LEVEL", "").strip().upper()
    level = logging.getLevelName(name) if name else logging.INFO
    return level if isinstance(level, int) else logging.INFO


def setup_logging(logs_dir=None):
    """Configure global logging handlers (idempotent).

    The tool is often installed under Program Files; when the log directory
    is not writable, logging continues on the console only.
    """
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    formatter = logging.Formatter(LOG_FORMAT)
    root_logger.setLevel(_level_from_env())

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logs_dir = Path(logs_dir) if logs_dir else Path(os.environ.get("NIS_LOGS_DIR") or Path("Data") / "Logs")
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            logs_dir / LOG_FILE_NAME,
            maxBytes=5 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
    except OSError:
        logging.warning("Cannot write logs under %s; console logging only", logs_dir, exc_info=True)
        return
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)
