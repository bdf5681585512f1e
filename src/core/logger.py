import logging
import os
import sys

import structlog
from dotenv import load_dotenv

load_dotenv()

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def resolve_level(name: str | None, default: int = logging.INFO) -> int:
    """Map a level name (case-insensitive) to its logging constant."""
    if not name:
        return default
    return LOG_LEVELS.get(name.upper(), default)


def setup_logging(level: int | None = logging.INFO) -> None:
    """
    Configure structured logging for the application.

    Log events go to stderr so that command summaries on stdout stay clean.

    Args:
        level: The logging level to use. Defaults to INFO.
    """
    logging.basicConfig(level=level, stream=sys.stderr, force=True)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
            pad_event=40,
        ),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


setup_logging(level=resolve_level(os.getenv("LOG_LEVEL")))

log = structlog.get_logger("log-clusters")
