# sectionshot/logger.py
"""
Logging utilities for the screenshot service
"""

import logging

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_console_handler = None


def setup_logging(level: str = "INFO"):
    """Attach a console handler to the service's root logger"""
    global _console_handler
    log_level = getattr(logging, str(level).upper(), logging.INFO)

    logger = logging.getLogger("sectionshot")
    logger.setLevel(log_level)

    # one console handler per process
    if _console_handler is None:
        _console_handler = logging.StreamHandler()
        _console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_console_handler)

    _console_handler.setLevel(log_level)

    return logger


def get_logger(name):
    """Get a logger instance for a specific module"""
    return logging.getLogger(name)
