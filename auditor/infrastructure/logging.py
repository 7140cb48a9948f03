import logging
import sys
from typing import Any, List, Optional, TextIO

import structlog
from structlog.types import Processor

from auditor.core.config import Settings, get_settings
from auditor.infrastructure.logging_processors import (
    ServiceContext,
    format_exception_info,
    sanitize_sensitive_data,
    set_log_severity,
)

# Remote sink requests would otherwise log one INFO line per audit event
QUIET_LOGGERS = ("httpx", "httpcore")


def shared_processors(settings: Settings) -> List[Processor]:
    """Chain applied to structlog and foreign stdlib records alike"""
    return [
        # Request context bound by the audit middleware
        structlog.contextvars.merge_contextvars,
        ServiceContext(settings.app_name, settings.environment),
        structlog.processors.add_log_level,
        set_log_severity,
        format_exception_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        # Must run last before rendering
        sanitize_sensitive_data,
    ]


def build_renderer(settings: Settings) -> Processor:
    if settings.log_format == "json":
        return structlog.processors.JSONRenderer(default=str)
    return structlog.dev.ConsoleRenderer(colors=settings.is_development)


def setup_logging(settings: Optional[Settings] = None, stream: Optional[TextIO] = None) -> None:
    """Route audit diagnostics and console events through structlog.

    Console-destination records arrive as the ``event`` value of an entry.
    """
    settings = settings or get_settings()
    processors = shared_processors(settings)

    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                build_renderer(settings),
            ],
        )
    )

    level = getattr(logging, settings.log_level)
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)
