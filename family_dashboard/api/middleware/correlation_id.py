"""Request correlation ID middleware.

Every request gets an id, taken from the client's X-Request-ID or
X-Correlation-ID header or freshly generated. It is stored in a context
variable so log records emitted while handling the request carry it, and it
is echoed back in the X-Request-ID response header.
"""

import uuid
from collections.abc import Callable
from contextvars import ContextVar
from typing import Any

from aiohttp import web

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


@web.middleware
async def correlation_id_middleware(
    request: web.Request, handler: Callable[[web.Request], Any]
) -> web.StreamResponse:
    """Extract or generate the correlation ID for a request."""
    correlation_id = (
        request.headers.get("X-Request-ID")
        or request.headers.get("X-Correlation-ID")
        or str(uuid.uuid4())
    )

    request_id_var.set(correlation_id)
    request["correlation_id"] = correlation_id

    try:
        response = await handler(request)
    except web.HTTPException as exc:
        exc.headers["X-Request-ID"] = correlation_id
        raise
    response.headers["X-Request-ID"] = correlation_id

    return response


def get_request_id() -> str:
    """Current request correlation ID, or "no-request-id" outside a request."""
    request_id = request_id_var.get()
    return request_id if request_id else "no-request-id"
