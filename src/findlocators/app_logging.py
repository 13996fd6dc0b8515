from __future__ import annotations

import logging
from pathlib import Path

from .settings import CONFIG_DIR, InspectorSettings

LOGGER_NAME = "findlocators"
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def build_logger(settings: InspectorSettings | None = None, log_dir: Path | None = None) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    logger.propagate = False
    use_file = settings.log_to_file if settings else True
    if use_file:
        try:
            target_dir = log_dir or CONFIG_DIR
            target_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(target_dir / "findlocators.log", encoding="utf-8")
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(file_handler)
            return logger
        except OSError:
            # Fall through to stderr when the log folder is not writable.
            pass

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(stream_handler)
    return logger
