"""Request producers for FastAPI/Starlette"""

from .audit import AuditMiddleware, StarletteEventProducer
from .context import (RequestContext, get_request_context,
                      reset_request_context, set_request_context)

__all__ = [
    "AuditMiddleware",
    "StarletteEventProducer",
    "RequestContext",
    "get_request_context",
    "set_request_context",
    "reset_request_context",
]
