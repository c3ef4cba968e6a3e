"""Logging setup for the pinshare logger tree."""

import logging

from pinshare.config import Settings

LOGGER_NAME = "pinshare"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(settings: Settings) -> logging.Logger:
    """
    Attach handlers to the pinshare logger. Earlier handlers are replaced, so
    building several apps in one process (tests) does not stack output.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    formatter = logging.Formatter(settings.log_format, datefmt=DATE_FORMAT)

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)

    handlers = [logging.StreamHandler()]
    file_error = None
    path = settings.log_file.strip()
    if path:
        try:
            handlers.append(logging.FileHandler(path, encoding="utf-8"))
        except OSError as e:
            file_error = e
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if file_error is not None:
        logger.warning("Could not open log file %s: %s", path, file_error)
    elif path:
        logger.info("Logging to file %s", path)
    return logger
