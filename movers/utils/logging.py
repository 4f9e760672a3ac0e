"""Configure structlog for JSON (or console) output on stderr."""

from __future__ import annotations

import logging
import sys

import structlog


def _renderer(fmt: str) -> structlog.types.Processor:
    if fmt == "console":
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def configure_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Set up structlog and the stdlib root logger.

    Call once at process startup, before the first log call.  Everything
    goes to stderr; ``movers fetch`` owns stdout for its JSON result.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            _renderer(fmt),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "movers") -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
