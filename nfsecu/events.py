from __future__ import annotations

import logging
import sys

import structlog

LOGGING_LEVEL_MAP: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

LOG = structlog.get_logger("nfsecu")


def configure_logging(level: str = "WARNING") -> None:
    """Send structured logs to stderr so stdout stays the step listing."""
    level_val = LOGGING_LEVEL_MAP.get(level.upper(), logging.WARNING)
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level_val),
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def log_event(level: str, message: str, **context: object) -> None:
    method = level.lower()
    if method == "warn":
        method = "warning"
    getattr(LOG, method, LOG.info)(message, **context)
