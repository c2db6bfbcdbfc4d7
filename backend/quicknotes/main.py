"""
QuickNotes Backend — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn quicknotes.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Req ID → Logging → GZip → CORS        │
    │                                                     │
    │  Routes:                                            │
    │    /api/notes (GET, POST)   /api/notes/{id}         │
    │    /api/status/mongodb      /health                 │
    │                                                     │
    │  app.state.connection_manager  (one per process)    │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging; the MongoDB connection is NOT opened here,
              the first request that needs it opens it.
    Shutdown: close the connection manager.
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

from quicknotes import __version__
from quicknotes.config import settings
from quicknotes.database import ConnectionManager
from quicknotes.exceptions import (
    ConfigurationError,
    NotFoundError,
    OperationFailedError,
    QuickNotesError,
    StoreConnectionError,
    ValidationError,
)
from quicknotes.middleware.logging import RequestLoggingMiddleware
from quicknotes.middleware.request_id import RequestIDMiddleware, request_id_var
from quicknotes.routes import health, notes

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Structured Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # Third-party loggers chatter at DEBUG/INFO on every operation
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("motor").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    connection: ConnectionManager = app.state.connection_manager

    logger.info("QuickNotes Backend starting up...")
    if not connection.is_configured:
        # Not fatal: health probes still answer, note calls report it
        logger.error("MONGODB_URI is not set; note operations will fail until it is.")
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("QuickNotes Backend shutting down...")
    await connection.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, error: str, message: str, details=None) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and one response format.

    Handler hierarchy:
        ValidationError         → 400 Bad Request
        RequestValidationError  → 400 Bad Request (unparseable body)
        NotFoundError           → 404 Not Found
        ConfigurationError      → 500 Internal Server Error
        StoreConnectionError    → 503 Service Unavailable
        OperationFailedError    → 500 Internal Server Error
        QuickNotesError (base)  → 500 Internal Server Error
        Exception (fallback)    → 500 Internal Server Error

    Driver error text is never placed in a response; it is logged.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(
            400, "validation_error", exc.message, {"errors": exc.errors}
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in err["loc"][1:]) or "body",
                "constraint": err["type"],
                "message": err["msg"],
            }
            for err in exc.errors()
        ]
        logger.warning("[%s] Malformed request: %s", request_id_var.get(""), errors)
        message = errors[0]["message"] if errors else "Invalid request"
        return _error_response(400, "validation_error", message, {"errors": errors})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        logger.error("[%s] Configuration error: %s", request_id_var.get(""), exc.message)
        return _error_response(500, "configuration_error", exc.message)

    @app.exception_handler(StoreConnectionError)
    async def handle_connection_error(request: Request, exc: StoreConnectionError):
        logger.error(
            "[%s] Database connection error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(
            503, "database_unavailable", exc.message, {"kind": exc.kind.value}
        )

    @app.exception_handler(OperationFailedError)
    async def handle_operation_failed(request: Request, exc: OperationFailedError):
        logger.error(
            "[%s] Operation failed: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, "operation_failed", exc.message)

    @app.exception_handler(QuickNotesError)
    async def handle_app_error(request: Request, exc: QuickNotesError):
        logger.error("[%s] Application error: %s", request_id_var.get(""), exc.message)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
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

def create_app(connection_manager: Optional[ConnectionManager] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        connection_manager: The store connection this app serves from.
            Defaults to one built from settings; tests pass a manager
            backed by a simulated store.
    """
    app = FastAPI(
        title="QuickNotes API",
        description="Create, list, edit and delete short text notes stored in MongoDB.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.connection_manager = connection_manager or ConnectionManager.from_settings(settings)

    # Middleware executes in REVERSE order of addition
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

    app.include_router(notes.router)
    app.include_router(health.router)

    return app


app = create_app()
