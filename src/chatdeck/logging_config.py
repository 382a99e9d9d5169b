"""structlog setup for chatdeck.

Library modules only call ``structlog.get_logger(__name__)``; applications
(the CLI) call ``configure_logging`` once at startup.
"""

import logging
import sys

import structlog

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_level(level: str | int) -> int:
    """Convert a level name to its numeric value. Unknown names mean WARNING."""
    if isinstance(level, int):
        return level
    return _LEVELS.get(level.strip().lower(), logging.WARNING)


def configure_logging(level: str | int = "warning") -> None:
    """Render log events to stderr, dropping those below ``level``."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(parse_level(level)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
