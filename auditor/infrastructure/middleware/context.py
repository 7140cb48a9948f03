from contextvars import ContextVar
from dataclasses import asdict, dataclass
from typing import Dict, Optional

from auditor.infrastructure.logging import bind_context, unbind_context

UNKNOWN = "unknown"


@dataclass(frozen=True)
class RequestContext:
    """Who made the current request, attached to error and db events"""

    user_id: str = UNKNOWN
    endpoint: str = ""
    ip: str = UNKNOWN
    user_agent: str = UNKNOWN

    def as_event_fields(self) -> Dict[str, str]:
        return {
            "userId": self.user_id,
            "endPoint": self.endpoint,
            "ip": self.ip,
            "userAgent": self.user_agent,
        }


request_context_var: ContextVar[Optional[RequestContext]] = ContextVar(
    "audit_request_context", default=None
)


def get_request_context() -> RequestContext:
    return request_context_var.get() or RequestContext()


def set_request_context(context: RequestContext):
    bind_context(**{f"request_{k}": v for k, v in asdict(context).items()})
    return request_context_var.set(context)


def reset_request_context(token) -> None:
    request_context_var.reset(token)
    unbind_context(*(f"request_{k}" for k in RequestContext.__dataclass_fields__))
