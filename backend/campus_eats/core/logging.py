"""
structlog setup for the kitchen service.

Every event carries a UTC timestamp, the logger name and, inside a request,
the request id bound by the HTTP middleware. Development renders to the
console; other environments emit one JSON object per line.
"""

import logging
import sys
import time
from typing import Any, Optional
from uuid import uuid4

import structlog
from structlog.types import Processor

from campus_eats.core.config import get_settings

# Chatty third-party loggers and the level they are held at
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "asyncio": logging.WARNING,
}


def configure_logging() -> None:
    """Install the structlog pipeline and route it through stdlib logging."""
    settings = get_settings()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.is_development:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )
    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Bind a request id to every event logged in the current context.

    Args:
        request_id: Id sent by the client in ``X-Request-ID``; a new UUID
            is generated when missing

    Returns:
        The bound request id
    """
    request_id = request_id or str(uuid4())
    structlog.contextvars.bind_contextvars(request_id=request_id)
    return request_id


def get_request_id() -> str:
    return structlog.contextvars.get_contextvars().get("request_id", "")


def clear_context() -> None:
    """Drop the request bindings once a response has been sent."""
    structlog.contextvars.clear_contextvars()


class PerformanceLogger:
    """
    Times a block and logs its duration under an operation name.

    Analytics reports and request handling run inside one of these. A block
    slower than ``slow_ms`` logs at warning level; a block that raises logs
    the exception type at error level and lets it propagate.
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger,
        operation: str,
        slow_ms: Optional[float] = None,
        **context: Any,
    ):
        self.logger = logger
        self.operation = operation
        self.slow_ms = (
            get_settings().log_slow_operation_ms if slow_ms is None else slow_ms
        )
        self.context = context
        self.duration_ms: Optional[float] = None
        self._started: Optional[float] = None

    def __enter__(self) -> "PerformanceLogger":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.duration_ms = round((time.perf_counter() - self._started) * 1000, 2)

        if exc_type is not None:
            self.logger.error(
                "Operation failed",
                operation=self.operation,
                duration_ms=self.duration_ms,
                error_type=exc_type.__name__,
                **self.context,
            )
            return

        log = self.logger.warning if self.duration_ms > self.slow_ms else self.logger.info
        log(
            "Operation completed",
            operation=self.operation,
            duration_ms=self.duration_ms,
            slow=self.duration_ms > self.slow_ms,
            **self.context,
        )


def log_performance(
    logger: structlog.stdlib.BoundLogger,
    operation: str,
    **context: Any,
) -> PerformanceLogger:
    """
    Time a block of work.

    Example:
        >>> with log_performance(logger, "analytics_report", granularity="day"):
        ...     report = aggregator.build_report(...)
    """
    return PerformanceLogger(logger, operation, **context)
