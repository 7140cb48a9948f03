import time
import traceback
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from auditor.core.models import EventType
from auditor.infrastructure.middleware.context import (UNKNOWN, RequestContext,
                                                       reset_request_context,
                                                       set_request_context)
from auditor.infrastructure.producer import EventProducer

if TYPE_CHECKING:
    from auditor.core.auditor import Audit


def first_stack_line(error: BaseException) -> str:
    """Innermost frame of the traceback as 'File ..., line N, in fn'"""
    frames = traceback.extract_tb(error.__traceback__)
    if not frames:
        return "no stack available"
    frame = frames[-1]
    return f'File "{frame.filename}", line {frame.lineno}, in {frame.name}'


def client_ip(request: Request) -> str:
    """Extract real client IP from request"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return UNKNOWN


def request_user_id(request: Request) -> str:
    user = getattr(request.state, "user", None)
    if user is None:
        return UNKNOWN
    if isinstance(user, dict):
        user_id = user.get("id") or user.get("_id")
    else:
        user_id = getattr(user, "id", None)
    return str(user_id) if user_id is not None else UNKNOWN


class AuditMiddleware(BaseHTTPMiddleware):
    """Emits a request event per response and an error event per unhandled exception"""

    def __init__(self, app, audit: "Audit", exclude_paths: Optional[Iterable[str]] = None):
        super().__init__(app)
        self.audit = audit
        self.exclude_paths = set(exclude_paths or ())

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        start_time = time.time()
        route = request.url.path
        if request.url.query:
            route = f"{route}?{request.url.query}"
        context = RequestContext(
            user_id=request_user_id(request),
            endpoint=route,
            ip=client_ip(request),
            user_agent=request.headers.get("user-agent", ""),
        )
        token = set_request_context(context)

        try:
            response = await call_next(request)
        except Exception as e:
            duration = round((time.time() - start_time) * 1000, 2)
            self.audit.log(
                {
                    "type": EventType.ERROR.value,
                    "action": "request failed",
                    "message": str(e) or type(e).__name__,
                    "method": request.method,
                    "statusCode": 500,
                    "route": route,
                    "statusMessage": "Internal Server Error",
                    "stack": first_stack_line(e),
                    "fullStack": "".join(traceback.format_exception(type(e), e, e.__traceback__)),
                    **context.as_event_fields(),
                }
            )
            self._log_request(request, context, 500, duration, outcome="failure")
            reset_request_context(token)
            raise

        duration = round((time.time() - start_time) * 1000, 2)
        self._log_request(request, context, response.status_code, duration)
        reset_request_context(token)
        return response

    def _log_request(
        self,
        request: Request,
        context: RequestContext,
        status_code: int,
        duration: float,
        outcome: Optional[str] = None,
    ) -> None:
        event: dict[str, Any] = {
            "type": EventType.REQUEST.value,
            "action": "incoming request",
            "message": f"{request.method} {context.endpoint} {status_code}",
            "duration": duration,
            "method": request.method,
            "statusCode": status_code,
            "route": context.endpoint,
            **context.as_event_fields(),
        }
        if outcome:
            event["outcome"] = outcome
        self.audit.log(event)


class StarletteEventProducer(EventProducer):
    """Request and error events for FastAPI/Starlette applications"""

    name = "starlette"

    def __init__(self, audit: "Audit", exclude_paths: Optional[Iterable[str]] = None):
        super().__init__(audit)
        self.exclude_paths = set(exclude_paths or ())

    def install(self, target: Any) -> Any:
        target.add_middleware(AuditMiddleware, audit=self.audit, exclude_paths=self.exclude_paths)
        return target
