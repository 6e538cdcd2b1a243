"""Logging setup shared by the CLI entry points."""

import sys

from loguru import logger

_LOG_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO") -> None:
    """Route loguru output to a single stderr sink at the given level.

    Console output for the operator goes through rich; the log sink carries
    diagnostics only.
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=_LOG_FORMAT)
