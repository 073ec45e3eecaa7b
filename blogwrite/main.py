"""
Blogwrite Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) builds every per-app collaborator (Database,
       PasswordHasher, TokenManager) from one Settings object and stores them
       on app.state. Nothing in a request path reads module-level globals.
Who:   uvicorn (`uvicorn blogwrite.main:app`) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware Chain:                                   │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌──────┐         │
    │  │ Req ID   │→│ Logging  │→│ GZip │→│ CORS │         │
    │  └──────────┘ └──────────┘ └──────┘ └──────┘         │
    │                                                      │
    │  Routers (/api):                                     │
    │  ┌──────┐ ┌───────┐ ┌───────┐ ┌────────┐             │
    │  │ auth │ │ users │ │ blogs │ │ health │             │
    │  └──────┘ └───────┘ └───────┘ └────────┘             │
    │                                                      │
    │  Exception Handlers:                                 │
    │  ┌────────────────────────────────────────────────┐  │
    │  │ BlogwriteError→status_code │ Validation→400    │  │
    │  │ Unknown route→404          │ Exception→500     │  │
    │  └────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Validate production settings (fail fast)
    3. Wait for the database (tenacity backoff)
    4. Create tables when DB_CREATE_TABLES is set

    Shutdown:
    1. Dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from blogwrite import __version__
from blogwrite.config import Settings
from blogwrite.database import Database
from blogwrite.exceptions import (
    BlogwriteError,
    DatabaseError,
    UnauthenticatedError,
    ValidationError,
)
from blogwrite.middleware.logging import RequestLoggingMiddleware
from blogwrite.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from blogwrite.routes import auth, blogs, health, users
from blogwrite.security import PasswordHasher, TokenManager

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configures the root logger once for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request/per-statement chatter
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    database: Database = app.state.database

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings)
    logger.info("=" * 60)
    logger.info("Blogwrite Backend starting up (%s)...", settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        raise

    await database.wait_until_ready()
    logger.info("Database reachable")

    if settings.db_create_tables:
        await database.create_all()
        logger.info("Database tables ensured")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Blogwrite Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(
    error: str,
    message: str,
    rid: str,
    errors: Optional[List[Dict[str, str]]] = None,
) -> Dict:
    body = {"error": error, "message": message, "request_id": rid}
    if errors:
        body["errors"] = errors
    return body


def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    """Flattens pydantic errors to [{"field", "message"}], dropping the body/query prefix."""
    result = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        result.append({
            "field": ".".join(loc) or "body",
            "message": err.get("msg", "Invalid value"),
        })
    return result


def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps exceptions to HTTP responses with one JSON shape:
    {"error", "message", "errors"?, "request_id"}.

    Handler hierarchy:
        BlogwriteError           → exc.status_code (400/401/403/404/500)
        RequestValidationError   → 400, field-level errors
        HTTPException 404        → 404 "Route not found"
        HTTPException (other)    → its status code
        Exception (fallback)     → 500, nothing internal leaked
    """

    @app.exception_handler(BlogwriteError)
    async def handle_blogwrite_error(request: Request, exc: BlogwriteError):
        rid = request_id_var.get("")
        headers = {}

        if isinstance(exc, DatabaseError):
            # Full context stays in the server log
            logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        elif exc.status_code >= 500:
            logger.error("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        if isinstance(exc, UnauthenticatedError):
            headers["WWW-Authenticate"] = "Bearer"

        errors = exc.errors if isinstance(exc, ValidationError) else None
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, exc.message, rid, errors),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Schema validation failures: reported before any business logic runs."""
        errors = _field_errors(exc)
        logger.debug("[%s] Field errors: %s", request_id_var.get(""), errors)
        return await handle_blogwrite_error(request, ValidationError(errors=errors))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        rid = request_id_var.get("")
        if exc.status_code == 404:
            return JSONResponse(
                status_code=404,
                content=_error_body("not_found", "Route not found", rid),
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body("http_error", str(exc.detail), rid),
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "Something went wrong!", rid),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: configuration to build the app from; read from the
                  environment when omitted.
    """
    settings = settings or Settings()

    app = FastAPI(
        title="Blogwrite API",
        description="Multi-user blogging backend: accounts, posts, likes, comments, profiles.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = Database(settings)
    app.state.password_hasher = PasswordHasher(settings)
    app.state.token_manager = TokenManager(settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(blogs.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `blogwrite.main:app` to be importable
app = create_app()
