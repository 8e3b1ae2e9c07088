"""
Storefront Backend — FastAPI Application Factory
==================================================

What:  Builds the FastAPI application: middleware, exception handlers, routers
       and the startup/shutdown lifecycle.
How:   create_app() returns a configured instance; uvicorn serves the
       module-level `app` (uvicorn storefront.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Access Log → GZip → CORS      │
    │                                                          │
    │  Routers:                                                │
    │  ┌───────────┐ ┌────────┐ ┌───────────┐ ┌────────────┐   │
    │  │ catalog   │ │ pages  │ │ settings  │ │ email-logs │   │
    │  └───────────┘ └────────┘ └───────────┘ └────────────┘   │
    │                                           + /health      │
    │  Exception Handlers:                                     │
    │  ValidationError→400  NotFoundError→404  others→500      │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Load DB_* credentials (abort startup if incomplete)
    3. Build the engine + session factory, store them on app.state
    4. Ensure the data directory exists

    Shutdown:
    1. Dispose the engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from storefront import __version__
from storefront.config import load_database_credentials, settings
from storefront.database import dispose_engine, init_database
from storefront.exceptions import (
    ConfigurationError,
    NotFoundError,
    StorefrontError,
    ValidationError,
)
from storefront.middleware.logging import RequestLoggingMiddleware
from storefront.middleware.request_id import RequestIDMiddleware, request_id_var
from storefront.routes import catalog, email_logs, health, pages
from storefront.routes import settings as settings_routes

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: 2025-01-15T12:00:00 [INFO] storefront.services.page_store: Page created: about
    """
    logging.basicConfig(
        level=getattr(logging, level or settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-statement and per-connection chatter
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: credentials are loaded exactly once here and handed to the
    engine factory. An incomplete DB_* set raises ConfigurationError, which
    aborts startup with the list of missing variables.
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("Storefront Backend %s starting up...", __version__)

    try:
        credentials = load_database_credentials()
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e.message)
        logger.error("Set the missing variables (environment or .env) and restart.")
        raise

    engine, session_factory = init_database(credentials)
    app.state.engine = engine
    app.state.session_factory = session_factory
    logger.info(
        "Database configured: %s@%s:%s/%s",
        credentials.user, credentials.host, credentials.port, credentials.name,
    )

    data_root = Path(settings.data_root)
    data_root.mkdir(parents=True, exist_ok=True)
    logger.info("Data directory: %s", data_root.resolve())

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Storefront Backend shutting down...")
    await dispose_engine(app.state.engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(exc: StorefrontError, rid: str) -> dict:
    """`error` always; `message` only when the operation exposes a diagnostic detail."""
    body = {"error": exc.message}
    if exc.detail:
        body["message"] = exc.detail
    body["request_id"] = rid
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Translate the application exception hierarchy into JSON error bodies.

    Handler hierarchy:
        ValidationError         → 400
        RequestValidationError  → 400 (malformed body or query parameter)
        NotFoundError           → 404
        StorefrontError (base)  → its status_code (500 for storage/database/server)
        Exception (fallback)    → 500, generic body

    Internal context (SQL errors, file paths) is logged, never returned;
    only an explicit `detail` reaches the client as `message`.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(status_code=400, content=error_body(exc, rid))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Malformed request: %s", rid, jsonable_errors(exc))
        return JSONResponse(
            status_code=400,
            content={
                "error": "Invalid request",
                "details": jsonable_errors(exc),
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(status_code=404, content=error_body(exc, rid))

    @app.exception_handler(StorefrontError)
    async def handle_storefront_error(request: Request, exc: StorefrontError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc, rid))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        # Runs outside the middleware stack, after the ContextVar was reset
        rid = request_id_var.get("") or getattr(request.state, "request_id", "")
        logger.error("[%s] Unexpected error: %s", rid, exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "request_id": rid},
        )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Field location and message of each validation failure, without echoing input."""
    return [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront API",
        description=(
            "Catalog lookups, page documents, branding settings and email log "
            "administration for the storefront."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(catalog.router)
    app.include_router(pages.router)
    app.include_router(settings_routes.router)
    app.include_router(email_logs.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
