"""
SNS API Server — FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the Database handle, registers middleware,
       exception handlers and routers, and returns the app.
Who:   uvicorn (`sns_api.main:app` or `python -m sns_api`) and the tests,
       which call create_app() with their own Database.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                     FastAPI App                      │
    │                                                      │
    │  Middleware:  Request ID → Logging → GZip → CORS     │
    │                                                      │
    │  Routes:      GET /   GET /health   /api/posts...    │
    │                                                      │
    │  Exception Handlers (all render {"error": message}): │
    │   SnsApiError→its status │ RequestValidation→400     │
    │   HTTPException→its status │ Exception→500           │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, log the listening address
    Shutdown: dispose the Database handle (close pooled connections)
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

from sns_api import __version__
from sns_api.config import Settings, settings as default_settings
from sns_api.database import Database
from sns_api.exceptions import SnsApiError
from sns_api.middleware.logging import RequestLoggingMiddleware
from sns_api.middleware.request_id import RequestIDMiddleware, request_id_var
from sns_api.routes import health, posts

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure root logging for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] sns_api.services.post_service: message
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


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings
    setup_logging(app_settings.log_level)
    logger.info("SNS API Server starting up (version %s)", __version__)
    logger.info("Server is running on http://%s:%d", app_settings.host, app_settings.port)

    yield

    logger.info("SNS API Server shutting down...")
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map every failure to {"error": message} with the right status.

        SnsApiError            → exc.status_code (400 / 404 / 500)
        RequestValidationError → 400 (malformed JSON or wrong field types)
        HTTPException          → exc.status_code (unknown route, bad method)
        Exception              → 500, traceback logged server-side only
    """

    @app.exception_handler(SnsApiError)
    async def handle_app_error(request: Request, exc: SnsApiError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), exc.errors())
        return _error(400, "リクエストの形式が正しくありません")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return _error(500, "サーバーエラーが発生しました")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use (defaults to the environment-loaded ones)
        database:     Persistence handle to inject; built from settings if omitted

    Returns:
        Configured FastAPI instance. The Database handle lives on
        app.state.database and is disposed when the app shuts down.
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="SNS API",
        description="Posts and likes for a minimal social network.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.database = database or Database(
        app_settings.database_url,
        pool_size=app_settings.db_pool_size,
        max_overflow=app_settings.db_max_overflow,
        pool_pre_ping=app_settings.db_pool_pre_ping,
        echo=app_settings.log_level == "DEBUG",
    )

    # ── Middleware (last added runs first) ────────────────────────────────
    origins = app_settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(posts.router)

    return app


app = create_app()
