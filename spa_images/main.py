"""
SPA Images Backend: FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routes and
       returns the app; `app` is the module-level instance for uvicorn.
Who:   `uvicorn spa_images.main:app`, the `spa-images` console script and
       the test client.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  Request ID  │→│ Logging  │→│ CORS / OPTIONS  │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌───────────────────────────────┐ │
    │  │ GET /health  │ │ /* → image route table        │ │
    │  └──────────────┘ └───────────────────────────────┘ │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌───────────────────────────────────────────────┐  │
    │  │ Validation/StorageFailure→400 │ NotFound→404  │  │
    │  │ DatabaseError→500 │ Exception→500             │  │
    │  └───────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, create the images table if missing
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from spa_images import __version__
from spa_images.config import settings
from spa_images.database import create_tables, dispose_engine
from spa_images.exceptions import (
    DatabaseError,
    NotFoundError,
    StorageFailureError,
    ValidationError,
)
from spa_images.middleware.cors import CORSHeadersMiddleware, add_cors_headers
from spa_images.middleware.logging import RequestLoggingMiddleware
from spa_images.middleware.request_id import RequestIDMiddleware, request_id_var
from spa_images.routes import health, images
from spa_images.schemas.image import ValidationErrorResponse

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Level comes from settings.log_level. Called once during startup.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # The access middleware already logs each request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:  logging, then CREATE TABLE IF NOT EXISTS for images.
    Shutdown: close all pooled database connections.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("SPA Images backend %s starting up...", __version__)

    if settings.create_tables:
        try:
            await create_tables()
            logger.info("Image table ready")
        except Exception as e:
            # Keep serving: /health reports the database as disconnected
            logger.error("Could not create the images table: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("SPA Images backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

    Handler hierarchy:
        ValidationError      → 400 {"errori": [...]}
        StorageFailureError  → 400 {"errori": [generic message]}
        NotFoundError        → 404 empty body
        405 from routing     → 404 empty body
        DatabaseError        → 500 generic message
        Exception (fallback) → 500 generic message

    Internal details (SQL, driver errors, stack traces) are logged, never
    returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=400,
            content=ValidationErrorResponse(errori=exc.errors).model_dump(),
        )

    @app.exception_handler(StorageFailureError)
    async def handle_storage_failure(request: Request, exc: StorageFailureError):
        rid = request_id_var.get("")
        logger.warning("[%s] Storage failure on %s %s", rid, request.method, request.url.path)
        return JSONResponse(
            status_code=400,
            content=ValidationErrorResponse(errori=[exc.message]).model_dump(),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return Response(status_code=404, media_type="application/json")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Methods outside the dispatch list match no route, same as any other miss."""
        if exc.status_code == 405:
            return Response(status_code=404, media_type="application/json")
        return await http_exception_handler(request, exc)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for unexpected errors.

        Starlette runs this handler outside the user middleware stack, so the
        CORS headers are added here explicitly.
        """
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        response = JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred.",
                "request_id": rid,
            },
        )
        return add_cors_headers(response)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    The image surface is dispatched by its own route table, so FastAPI's
    generated docs would be empty; they are disabled.
    """
    app = FastAPI(
        title="SPA Images API",
        description="REST backend storing the images shown by the SPA.",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → CORS → routes
    app.add_middleware(CORSHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    # health first: the image dispatcher catches every other path
    app.include_router(health.router)
    app.include_router(images.router)

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn on the configured host/port."""
    import uvicorn

    uvicorn.run(
        "spa_images.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
