# keyrelay/utils/logger.py

import logging

from keyrelay import config

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_configured = False


def setup_logger(level: str = None) -> logging.Logger:
    """Configure the root logger once and return the package logger."""
    global _configured
    level = level or config.LOG_LEVEL

    if not _configured:
        logging.basicConfig(level=level, format=LOG_FORMAT)
        _configured = True
    else:
        logging.getLogger().setLevel(level)

    return logging.getLogger("keyrelay")
