# utils/logging.py
import logging
import os

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
APP_LOGGER = "quiz_app"


def setup_logging(log_dir: str, filename: str, level: str = "INFO") -> logging.Logger:
    """Send the app's records to stderr and to ``log_dir/filename``. Safe on every rerun."""
    logger = logging.getLogger(APP_LOGGER)
    if logger.handlers:
        return logger

    os.makedirs(log_dir, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT)
    for handler in (logging.StreamHandler(),
                    logging.FileHandler(os.path.join(log_dir, filename), encoding="utf-8")):
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level.upper())
    logger.propagate = False
    return logger
