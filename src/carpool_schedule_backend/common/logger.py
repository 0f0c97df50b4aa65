'''
Application-wide logger; every module imports `log` from here.
'''
import logging
import sys

from .config import settings

LOGGER_NAME = 'carpool-backend'
LOG_FORMAT = '%(asctime)s - %(module)s - %(levelname)s\n - %(message)s'


def setup_logger(name: str = LOGGER_NAME, level: str = settings.LOG_LEVEL) -> logging.Logger:
    """
    Builds the named logger writing to stdout.
    Calling it twice for the same name never stacks a second handler.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level.upper())

    if not logger.handlers:
        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(stdout_handler)

    return logger


log = setup_logger()
