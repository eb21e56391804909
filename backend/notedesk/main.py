"""
NoteDesk Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn notedesk.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌─────────────┐          │
    │  │  Req ID  │→│ Logging  │→│ Route Guard │→ CORS    │
    │  └──────────┘ └──────────┘ └─────────────┘          │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌───────────┐ ┌───────┐ ┌───────┐ │
    │  │ /api/rpc/*   │ │ /api/auth │ │ pages │ │/health│ │
    │  └──────────────┘ └───────────┘ └───────┘ └───────┘ │
    │                                                     │
    │  Exception Handlers:                                │
    │  Unauthorized→401 │ Validation→400 │ NotFound→404   │
    │  AuthProvider→502 │ Database→500   │ other→500      │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check, "ready" banner
    Shutdown: close the auth HTTP client, dispose the database engine
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

from notedesk import __version__
from notedesk.config import settings
from notedesk.database import dispose_engine
from notedesk.exceptions import (
    AuthProviderError,
    DatabaseError,
    MethodNotAllowedError,
    NoteDeskError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from notedesk.middleware.logging import RequestLoggingMiddleware
from notedesk.middleware.request_id import (
    RequestContextFilter,
    RequestIDMiddleware,
    request_id_var,
)
from notedesk.middleware.route_guard import RouteGuardMiddleware
from notedesk.routes import auth, health, pages, rpc
from notedesk.services.auth_service import auth_client

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Called once during app startup, before any other initialization.
    Every record carries the request ID and resolved user id through
    RequestContextFilter ("-" outside a request).
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestContextFilter())
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s user=%(user_id)s]: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Third-party libraries that log every query / connection
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("NoteDesk Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: public pages and /health still work, and every
        # session lookup fails closed (treated as signed out)
        logger.error("Configuration error: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("NoteDesk Backend shutting down...")
    await auth_client.aclose()
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
) -> JSONResponse:
    content = {
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and one response envelope.

    Handler hierarchy:
        UnauthorizedError      → 401
        ValidationError        → 400 (details.fields: per-field messages)
        RequestValidationError → 400 (FastAPI body validation, same shape)
        NotFoundError          → 404
        MethodNotAllowedError  → 405
        AuthProviderError      → 502
        DatabaseError          → 500 (context logged, never returned)
        NoteDeskError (base)   → 500
        Exception (fallback)   → 500
    """

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return _error_response(401, exc.code, exc.message)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info("Validation error: %s", exc.message)
        return _error_response(400, exc.code, exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        fields = {}
        for error in exc.errors():
            # Drop the leading "body"/"query" segment FastAPI adds
            loc = [str(part) for part in error["loc"][1:]] or ["_input"]
            fields.setdefault(".".join(loc), []).append(error["msg"])
        return _error_response(400, ValidationError.code, "Invalid request", {"fields": fields})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, exc.code, exc.message)

    @app.exception_handler(MethodNotAllowedError)
    async def handle_method_not_allowed(request: Request, exc: MethodNotAllowedError):
        return _error_response(405, exc.code, exc.message)

    @app.exception_handler(AuthProviderError)
    async def handle_auth_provider_error(request: Request, exc: AuthProviderError):
        logger.error("Auth provider error: %s | Context: %s", exc.message, exc.context)
        return _error_response(502, exc.code, exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("Database error: %s | Context: %s", exc.message, exc.context)
        return _error_response(500, exc.code, exc.message)

    @app.exception_handler(NoteDeskError)
    async def handle_app_error(request: Request, exc: NoteDeskError):
        logger.error("Application error: %s", exc.message)
        return _error_response(500, exc.code, exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "Unexpected error: %s",
            str(exc),
            exc_info=True,
        )
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="NoteDesk API",
        description="Personal notes and profile management behind session-cookie authentication.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = outermost. Execution order:
    # RequestID → Logging → RouteGuard → GZip → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RouteGuardMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(rpc.router)
    app.include_router(auth.router)
    app.include_router(health.router)
    app.include_router(pages.router)

    return app


app = create_app()
