"""Logging configuration using loguru.

Modules log through ``from loguru import logger`` directly; entry points
(the CLI and the web app) call :func:`setup_logging` once to pick the level
and sinks.
"""

import sys

from loguru import logger


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    fmt: str = "<level>[{level.name}]</level> {message}",
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """
    Configure loguru with console and optional file output.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR).
        log_file: Path to log file. If None, only logs to stderr.
        fmt: Loguru format string.
        rotation: Log file rotation size.
        retention: How long to keep rotated logs.
    """
    logger.remove()
    logger.add(sys.stderr, level=level, format=fmt)

    if log_file:
        logger.add(
            log_file,
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function} | {message}",
            rotation=rotation,
            retention=retention,
        )
