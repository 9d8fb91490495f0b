"""Logging configuration for claudemonitor using structlog.

Structured key/value logging to stderr so log output never mixes with
the usage display on stdout.
"""

from __future__ import annotations

import logging
import sys
import time
from typing import Any

import structlog


def configure_logging(
    log_level: str = "WARNING",
    log_format: str = "colored",
    log_timestamps: bool = True,
) -> None:
    """Configure structlog with console output.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        log_format: Output format - "colored" for a terminal, "plain" for redirection
        log_timestamps: Whether to include timestamps
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso" if log_timestamps else None),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "colored":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
        )
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper(), logging.WARNING),
        force=True,
    )

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Logger name, typically __name__
    """
    return structlog.get_logger(name)


class Timer:
    """Context manager that logs the duration of an operation.

    Example:
        with Timer(logger, "refresh_cycle") as timer:
            await cycle()
            timer.complete(state="loaded")
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger,
        operation: str,
        **context: Any,
    ) -> None:
        self.logger = logger.bind(operation=operation, **context)
        self.operation = operation
        self.start_time: float = 0.0
        self.completed = False

    def __enter__(self) -> Timer:
        self.start_time = time.monotonic()
        self.logger.debug(f"{self.operation}_started")
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        duration_ms = round((time.monotonic() - self.start_time) * 1000, 2)

        if exc_type is not None:
            self.logger.error(
                f"{self.operation}_failed",
                duration_ms=duration_ms,
                error_type=exc_type.__name__,
                error=str(exc_val) if exc_val else None,
            )
        elif not self.completed:
            self.logger.info(f"{self.operation}_completed", duration_ms=duration_ms)

    def complete(self, **extra_context: Any) -> None:
        """Log completion with additional context."""
        duration_ms = round((time.monotonic() - self.start_time) * 1000, 2)
        self.completed = True
        self.logger.info(
            f"{self.operation}_completed",
            duration_ms=duration_ms,
            **extra_context,
        )
