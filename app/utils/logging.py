"""
Logging utility module.

Console logging is configured once at application start-up; a daily file
handler is added when a log directory is configured.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """
    Configure the root logger.

    Args:
        level: Level name such as ``INFO`` or ``DEBUG``
        log_dir: Directory for the daily log file; file logging is off when unset
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    if log_dir:
        setup_file_logging(log_dir)


def setup_file_logging(log_dir: str = "logs") -> Path:
    """
    Set up file logging in addition to console logging.

    Args:
        log_dir: Directory to store log files
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d")
    log_file = log_path / f"app_{timestamp}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logging.getLogger().addHandler(file_handler)
    return log_file
