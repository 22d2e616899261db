# orders_analytics/core/logging.py
import logging

LOGGER_NAME = "orders_analytics"


def setup_logging(level: str | int = "INFO") -> logging.Logger:
    """
    Configure the package logger.

    Console output only, unified format with timestamp and level.
    Calling it again only updates the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Avoid duplicate handlers if setup_logging() is called multiple times
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    logger.debug("Logger initialized")
    return logger
