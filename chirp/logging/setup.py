"""Structlog configuration for chirp."""

import logging
import sys

import structlog

from chirp import config


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """
    Route chirp's structured events to stderr.

    Stdout belongs to command output, so log lines never mix with it. Events
    are key/value pairs (``post_id``, ``action``, ``error`` ...) rendered
    either for a terminal or as one JSON object per line.

    Args:
        level: Log level name, defaults to LOG_LEVEL
        fmt: "json" or "console", defaults to LOG_FORMAT
    """
    log_level = getattr(logging, (level or config.LOG_LEVEL).upper(), logging.WARNING)
    fmt = (fmt or config.LOG_FORMAT).lower()

    processors: list = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if fmt == "json":
        processors.extend([structlog.processors.format_exc_info, structlog.processors.JSONRenderer()])
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Logger carrying the emitting module's name.

    The returned proxy resolves the configuration on each call, so module
    level loggers pick up configure_logging() run later by the CLI.
    """
    return structlog.get_logger(logger_name=name)
