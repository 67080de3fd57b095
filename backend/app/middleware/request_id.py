"""
Blog API — Request ID Middleware
==================================

What:  Assigns a short correlation id to each request and returns it in the
       X-Request-ID response header.
How:   Reuses the client's X-Request-ID when sent, otherwise generates one.
       The id is stored in a ContextVar (for loggers and exception handlers)
       and on request.state.

Unhandled exceptions are turned into the 500 error envelope here, inside the
middleware chain, so they still carry the request id in body and header.
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

# Coroutine-local: concurrent requests on one event loop each see their own id.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


def new_request_id() -> str:
    return str(uuid.uuid4())[:8]


def internal_error_response(rid: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again or contact support.",
            "request_id": rid,
        },
    )


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
        request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error("[%s] Unexpected error on %s %s: %s",
                         rid, request.method, request.url.path, e, exc_info=True)
            response = internal_error_response(rid)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
