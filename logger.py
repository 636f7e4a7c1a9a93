"""Logging configuration for the lending service."""
import logging
import sys

ROOT_LOGGER = "library"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Set up the service logger with a console handler."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers
    logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logger.addHandler(console_handler)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child of the service logger."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
