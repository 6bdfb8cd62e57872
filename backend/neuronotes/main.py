"""
NeuroNotes Backend: FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers;
       the lifespan sets up logging and (for SQLite) the schema.
Who:   uvicorn (`uvicorn neuronotes.main:app`) and the test suite.

Application Architecture:
    ┌────────────────────────────────────────────────────────────┐
    │                        FastAPI App                         │
    │                                                            │
    │  Middleware Chain:                                         │
    │  Request ID → Rate Limit (AI) → Logging → Session → GZip   │
    │                                                            │
    │  Routes:                                                   │
    │  /api/notes   /api/signup   /api/auth/*   /api/ai/*        │
    │  /health      HTML pages (/, /login, /note/..., /ai/...)   │
    │                                                            │
    │  Exception Handlers:                                       │
    │  Validation→400  Auth→401  NotFound→404                    │
    │  LLM→500  Database→500  anything else→500                  │
    └────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration report, create tables on SQLite
    Shutdown: dispose the database engine
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
from starlette.middleware.sessions import SessionMiddleware

from neuronotes import __version__
from neuronotes.config import settings
from neuronotes.database import dispose_engine, init_models
from neuronotes.exceptions import (
    AuthenticationError,
    DatabaseError,
    LLMServiceError,
    NeuroNotesError,
    NotFoundError,
    ValidationError,
)
from neuronotes.middleware.logging import RequestLoggingMiddleware
from neuronotes.middleware.rate_limit import RateLimitMiddleware
from neuronotes.middleware.request_id import RequestIDMiddleware, request_id_var
from neuronotes.routes import ai, auth, health, notes, pages
from neuronotes.views.state import GENERIC_ERROR

logger = logging.getLogger(__name__)

GENERIC_SERVER_MESSAGE = "An internal error occurred. Please try again later."

# Browser session lifetime in seconds
SESSION_MAX_AGE = 14 * 24 * 60 * 60


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once at startup.

    Format: 2024-01-15T12:00:00 [INFO] neuronotes.services.note_service: Note created: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request chatter from libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("NeuroNotes Backend %s starting up...", __version__)

    # Misconfiguration is reported, not fatal: notes keep working without a Gemini key
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    if settings.is_sqlite:
        await init_models()
        logger.info("SQLite schema ready")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("NeuroNotes Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _is_page_request(request: Request) -> bool:
    path = request.url.path
    return not (path.startswith("/api") or path in ("/health", "/docs", "/redoc", "/openapi.json"))


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
    headers: Optional[dict] = None,
):
    """JSON error body for the API; the error page for browser pages on 5xx."""
    rid = request_id_var.get("")
    if status_code >= 500 and _is_page_request(request):
        return pages.templates.TemplateResponse(
            request,
            "error.html",
            {"message": GENERIC_ERROR, "request_id": rid},
            status_code=status_code,
        )

    content = {"error": error, "message": message, "request_id": rid}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    message = str(first.get("msg", "Invalid request")).removeprefix("Value error, ")
    location = [str(part) for part in first.get("loc", ()) if part != "body"]
    if first.get("type") == "missing" and location:
        return f"{location[-1].capitalize()} is required"
    return message


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy onto HTTP responses.

        RequestValidationError  → 400 (not FastAPI's default 422)
        ValidationError         → 400
        AuthenticationError     → 401
        NotFoundError           → 404
        LLMServiceError         → 500, endpoint message
        DatabaseError           → 500, generic message
        NeuroNotesError         → 500, generic message
        Exception               → 500, generic message

    Server-side details go to the log only.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = _first_validation_message(exc)
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), message)
        return _error_response(request, 400, "validation_error", message)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(request, 400, "validation_error", exc.message, details=exc.context)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return _error_response(
            request, 401, "unauthorized", exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(request, 404, "not_found", exc.message)

    @app.exception_handler(LLMServiceError)
    async def handle_llm_error(request: Request, exc: LLMServiceError):
        logger.error(
            "[%s] LLM service error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _error_response(request, 500, "llm_service_error", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _error_response(request, 500, "server_error", GENERIC_SERVER_MESSAGE)

    @app.exception_handler(NeuroNotesError)
    async def handle_app_error(request: Request, exc: NeuroNotesError):
        logger.error(
            "[%s] Application error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _error_response(request, 500, "server_error", GENERIC_SERVER_MESSAGE)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return _error_response(
            request, 500, "internal_server_error",
            "An unexpected error occurred. Please try again later.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="NeuroNotes API",
        description=(
            "Personal notes with account login, plus AI chat and text generation "
            "over your notes via Google Gemini."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: RequestID → RateLimit → Logging → Session → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.secret_key,
        session_cookie=settings.session_cookie_name,
        max_age=SESSION_MAX_AGE,
        same_site="lax",
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(notes.router)
    app.include_router(ai.router)
    app.include_router(health.router)
    app.include_router(pages.router)

    return app


# uvicorn entry point: neuronotes.main:app
app = create_app()
