"""structlog configuration shared by the CLI and the web server."""

import logging
import sys
from typing import TextIO

import structlog


def configure_logging(
    level: str = "INFO", log_format: str = "json", file: TextIO | None = None
) -> None:
    """Configure structlog processors and output.

    Args:
        level: Minimum log level name (e.g. "INFO", "DEBUG")
        log_format: "json" for machine-readable lines, "console" for humans
        file: Stream to write to (defaults to stderr)
    """
    renderer = (
        structlog.dev.ConsoleRenderer()
        if log_format == "console"
        else structlog.processors.JSONRenderer()
    )
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        # Resolve the stream per logger so redirected stderr is honored
        logger_factory=lambda *args: structlog.PrintLogger(file or sys.stderr),
        cache_logger_on_first_use=False,
    )
