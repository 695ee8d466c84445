"""Logging configuration."""

import sys

from loguru import logger

from settings import LOG_DIR, LOG_LEVEL, LOG_RETENTION

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | "
    "<cyan>{extra[component]}</cyan> | <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {extra[component]} | {name}:{function}:{line} | {message}"


def setup_logging(level: str = LOG_LEVEL, to_file: bool = True, component: str = "cache"):
    """Console output plus, optionally, one daily file per component.

    The foreground cache and the edge interceptor log under different
    component names, so their files can be read side by side.
    """
    logger.remove()
    logger.configure(extra={"component": component})

    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if to_file:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        logger.add(
            LOG_DIR / f"quickfrench_{component}_{{time:YYYY-MM-DD}}.log",
            format=FILE_FORMAT,
            level="DEBUG",
            rotation="00:00",
            retention=LOG_RETENTION,
            compression="gz",
        )
        logger.info("Logging {} to {}", component, LOG_DIR)

    return logger
