"""Loguru setup for sync runs.

Log lines go to stderr and the optional log file. Stdout carries only
the results summary and repository listings.
"""

import logging
import sys

from loguru import logger

from bulkrepo.config.models import LoggingConfig


class _InterceptHandler(logging.Handler):
    """Route standard library logging (httpx, httpcore) through loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # report the library call site, not logging internals
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(config: LoggingConfig) -> None:
    """Replace loguru sinks and route library logging through loguru."""
    logger.remove()

    if config.format == "json":
        fmt = "{message}"
        serialize = True
    else:
        fmt = "<green>{time:HH:mm:ss}</green> <level>{level: <7}</level> {message}"
        serialize = False

    logger.add(
        sys.stderr,
        format=fmt,
        level=config.level,
        serialize=serialize,
        colorize=config.format == "console",
    )

    if config.file:
        logger.add(
            config.file,
            format=fmt,
            level=config.level,
            serialize=serialize,
            rotation=config.rotation,
            retention=config.retention,
            compression="gz",
        )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger.debug("Logging configured: level={} format={}", config.level, config.format)
