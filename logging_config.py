"""
Structured logging for the STH auditor.

Log events go to stderr through structlog so that stdout only carries the
outcome printed for the operator. Verbosity follows the -v count of the CLI.
"""

import logging
import sys
from typing import Any

import structlog

LEVELS = {0: logging.WARNING, 1: logging.INFO}


def level_for(verbosity: int) -> int:
    return LEVELS.get(verbosity, logging.DEBUG) if verbosity >= 0 else logging.WARNING


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # looked up per call so a replaced sys.stderr is honoured
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(verbosity: int = 0) -> None:
    """Configure structlog once per process; calling again only changes the level."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_for(verbosity)),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str = None, **initial_values: Any) -> Any:
    if name:
        initial_values.setdefault("logger_name", name)
    return structlog.get_logger(**initial_values)


configure_logging()
