import logging
import os
import sys
from logging.handlers import RotatingFileHandler

FORMAT = '[%(asctime)s] [%(levelname)s] %(message)s'


def setup_logger(name="ffmux", log_file=None, level=None):
    """
    Sets up a logger with a console handler and, when log_file is given,
    a rotating file handler. Safe to call repeatedly.
    """
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    elif logger.level == logging.NOTSET:
        logger.setLevel(logging.INFO)

    formatter = logging.Formatter(FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    # Console Handler (added once)
    has_console = any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, RotatingFileHandler)
        for h in logger.handlers
    )
    if not has_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_path = os.path.abspath(os.path.expanduser(log_file))
        has_file = any(
            isinstance(h, RotatingFileHandler) and h.baseFilename == log_path
            for h in logger.handlers
        )
        if not has_file:
            log_dir = os.path.dirname(log_path)
            if log_dir and not os.path.exists(log_dir):
                os.makedirs(log_dir)
            file_handler = RotatingFileHandler(
                log_path, maxBytes=10*1024*1024, backupCount=5, encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
