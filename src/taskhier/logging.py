"""Structured logging configuration for taskhier.

Uses structlog for structured, context-rich logging that supports
both human-readable console output and machine-readable JSON format.
Logs go to stderr; user-facing feedback lines are printed to stdout by
taskhier.ops.
"""

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from taskhier.config import BaseSettings


def configure_logging(settings: "BaseSettings | None" = None) -> None:
    """Configure structured logging based on settings.

    Args:
        settings: Application settings. If None, uses defaults.
    """
    log_level = logging.WARNING
    log_format = "console"

    if settings is not None:
        log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
        log_format = settings.log_format

    _configure_structlog(log_level, log_format)

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _configure_structlog(log_level: int, log_format: str) -> None:
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance.

    If the host application has not configured structlog, the package
    defaults apply (warning level, stderr) so stdout carries only the
    feedback lines printed by taskhier.ops.

    Args:
        name: Optional logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    if not structlog.is_configured():
        _configure_structlog(logging.WARNING, "console")
    return structlog.get_logger(name) if name else structlog.get_logger()


def bind_context(**kwargs: object) -> None:
    """Bind context variables to all subsequent log calls in the current context.

    Example:
        bind_context(task_uuid=str(task_uuid))
        logger.info("task_reconciled")  # Will include task_uuid
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from the logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


class Loggers:
    """Pre-configured logger instances for taskhier components."""

    @staticmethod
    def cache() -> structlog.stdlib.BoundLogger:
        """Logger for the task cache."""
        return get_logger("taskhier.cache")

    @staticmethod
    def client() -> structlog.stdlib.BoundLogger:
        """Logger for Taskwarrior invocations."""
        return get_logger("taskhier.client")

    @staticmethod
    def ops() -> structlog.stdlib.BoundLogger:
        """Logger for the mutation helpers."""
        return get_logger("taskhier.ops")
