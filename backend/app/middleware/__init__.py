"""
Blog API — Middleware Package
===============================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit first: rejects abusive clients before any other work
    2. Request ID: assigns the correlation id every later log line uses
    3. Logging: one access-log line per request with status and duration

    Responses travel back through the chain in reverse, so the request id is
    on the response headers by the time the logging middleware records it.
"""

from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_id import (
    RequestIDMiddleware,
    internal_error_response,
    request_id_var,
)

__all__ = [
    "RateLimitMiddleware",
    "RequestIDMiddleware",
    "RequestLoggingMiddleware",
    "internal_error_response",
    "request_id_var",
]
