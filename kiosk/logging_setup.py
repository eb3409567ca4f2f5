from __future__ import annotations

import logging
import os

from kiosk.config import Settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"
LOG_FILE_NAME = "kiosk.log"

logger = logging.getLogger("kiosk")


def configure_logging(settings: Settings) -> logging.Logger:
    """Attach console and file handlers to the ``kiosk`` logger.

    Safe to call more than once; handlers are only added the first time. A log
    directory that cannot be created leaves console logging in place.
    """
    logger.setLevel(getattr(logging, settings.log_level, logging.INFO))
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    try:
        os.makedirs(settings.log_dir, exist_ok=True)
        file_handler = logging.FileHandler(
            os.path.join(settings.log_dir, LOG_FILE_NAME), encoding="utf-8")
    except OSError as e:
        logger.warning("File logging disabled (%s): %s", settings.log_dir, e)
    else:
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
