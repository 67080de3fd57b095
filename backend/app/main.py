"""
Blog API — FastAPI Application Factory
========================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds Settings, the Database and the Authenticator, puts
       them on app.state, then registers middleware, exception handlers and
       routers.
Who:   uvicorn imports `app.main:app`; tests call create_app(settings).

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                      FastAPI App                        │
    │                                                         │
    │  app.state: settings │ db (Database) │ authenticator     │
    │                                                         │
    │  Middleware Chain:                                      │
    │  ┌────────────┐ ┌──────────┐ ┌──────────┐               │
    │  │ Rate Limit │→│ Req ID   │→│ Logging  │→ GZip → CORS  │
    │  └────────────┘ └──────────┘ └──────────┘               │
    │                                                         │
    │  Routers (/api/v1):                                     │
    │  auth │ users │ posts │ comments │ likes   + /health    │
    │                                                         │
    │  Exception Handlers:                                    │
    │  400 validation │ 401 auth │ 403 owner │ 404 │ 429 │ 500│
    └─────────────────────────────────────────────────────────┘

Lifecycle:
    Startup (fails, and the process exits, on any error):
    1. Configure logging
    2. Validate configuration (signing secret, page sizes)
    3. Ping the database
    4. Create tables when DB_AUTO_CREATE is set

    Shutdown:
    1. Dispose the database engine (close pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import __version__
from app.config import Settings
from app.database import Database
from app.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BlogAPIError,
    NotFoundError,
    RateLimitExceededError,
    StorageError,
    ValidationError,
)
from app.middleware import (
    RateLimitMiddleware,
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    internal_error_response,
    request_id_var,
)
from app.routes import auth, comments, health, likes, posts, users
from app.services.auth_service import Authenticator

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every operation
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    db: Database = app.state.db

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("Blog API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        logger.error("Fix the configuration and restart the server.")
        raise

    try:
        await db.ping()
    except Exception as e:
        logger.error("Database unreachable at startup: %s", e)
        raise

    if settings.db_auto_create:
        await db.create_all()
        logger.info("Database tables created (DB_AUTO_CREATE=true)")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Blog API shutting down...")
    await db.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    exc: BlogAPIError,
    include_details: bool = True,
    message: Optional[str] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    content = {
        "error": exc.error_code,
        "message": message or exc.message,
        "request_id": request_id_var.get(""),
    }
    if include_details and exc.context:
        content["details"] = exc.context
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses with one error envelope:

        {"error": code, "message": text, "details": {...}?, "request_id": id}

    Handler hierarchy:
        ValidationError / AlreadyExistsError → 400
        RequestValidationError (pydantic)    → 400
        AuthenticationError                  → 401 + WWW-Authenticate: Bearer
        AuthorizationError                   → 403
        NotFoundError                        → 404
        RateLimitExceededError               → 429 + Retry-After
        StorageError                         → 500
        Exception (fallback)                 → 500

    401 and 500 responses never carry details; their context is logged only.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        # Only loc/msg/type: pydantic's "input" would echo passwords back.
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
            for err in exc.errors()
        ]
        rid = request_id_var.get("")
        logger.warning("[%s] Request validation failed: %d error(s)", rid, len(errors))
        return JSONResponse(
            status_code=400,
            content={
                "error": ValidationError.error_code,
                "message": "Request validation failed",
                "details": {"errors": errors},
                "request_id": rid,
            },
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        logger.info(
            "[%s] Authentication failed on %s %s: %s",
            request_id_var.get(""), request.method, request.url.path, exc.reason,
        )
        return _error_response(
            exc, include_details=False, headers={"WWW-Authenticate": "Bearer"}
        )

    @app.exception_handler(AuthorizationError)
    async def handle_authorization_error(request: Request, exc: AuthorizationError):
        return _error_response(exc, include_details=False)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(exc, include_details=False)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return _error_response(exc, headers={"Retry-After": str(exc.retry_after)})

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error(
            "[%s] Storage error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _error_response(exc, include_details=False)

    @app.exception_handler(BlogAPIError)
    async def handle_blog_api_error(request: Request, exc: BlogAPIError):
        logger.error("[%s] %s: %s | Context: %s",
                     request_id_var.get(""), type(exc).__name__, exc.message, exc.context)
        return _error_response(exc, include_details=exc.status_code < 500)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Unknown routes, wrong methods and other framework-level errors."""
        codes = {404: "not_found", 405: "method_not_allowed"}
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": codes.get(exc.status_code, "http_error"),
                "message": str(exc.detail),
                "request_id": request_id_var.get(""),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        # Only reached for errors raised outside RequestIDMiddleware.
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, exc, exc_info=True)
        return internal_error_response(rid)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: configuration to use; read from the environment when omitted

    The Database and Authenticator are built here rather than in the lifespan
    so that they exist even when the ASGI server (or a test transport) does
    not run lifespan events.
    """
    settings = settings or Settings()

    app = FastAPI(
        title="Blog API",
        description=(
            "REST backend for a blogging platform: signup and login, profiles, "
            "posts with tags, categories, media and revisions, comments and likes."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.db = Database(settings)
    app.state.authenticator = Authenticator(settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Executed in reverse order of addition: RateLimit runs first.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After", "WWW-Authenticate"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_requests,
        window=settings.rate_limit_window,
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(posts.router)
    app.include_router(comments.router)
    app.include_router(likes.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `app.main:app` to be importable.
app = create_app()
