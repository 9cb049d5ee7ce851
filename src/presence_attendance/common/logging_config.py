from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
FILE_LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5


def configure_logging(level: str = "INFO", *, log_file: Optional[str | Path] = None) -> logging.Logger:
    """Configure the package logger; adds a rotating file handler when ``log_file`` is set."""
    logger = logging.getLogger("presence_attendance")
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if not any(getattr(h, "_presence_attendance", False) for h in logger.handlers):
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter(LOG_FORMAT))
        stream._presence_attendance = True
        logger.addHandler(stream)

        if log_file:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT)
            file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
            file_handler._presence_attendance = True
            logger.addHandler(file_handler)

    return logger
