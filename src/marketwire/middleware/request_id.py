"""Request ID middleware — unique ID per request for tracing.

Learn: Every request gets an ID, either from the incoming X-Request-ID
header (set by the marketplace gateway) or auto-generated. The ID, and
the gateway-supplied user id when present, are bound to structlog's
contextvars so every log line for the request carries them.
"""

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Generate and propagate a unique request ID."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex

        structlog.contextvars.clear_contextvars()
        context = {"request_id": request_id}
        user_id = request.headers.get("X-User-ID")
        if user_id:
            context["user_id"] = user_id
        structlog.contextvars.bind_contextvars(**context)

        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response
