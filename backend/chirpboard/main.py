"""
Chirpboard Backend: FastAPI Application Factory
===============================================

What:  Builds and configures the FastAPI application.
How:   `create_app(settings)` wires settings, the injected Database, the
       AccountService (bcrypt cost from settings), the live-update hub,
       middleware, exception handlers and routers.
Who:   uvicorn (`uvicorn chirpboard.main:app`) and the test suite, which
       calls create_app() with its own Settings.

Application Layout:
    Middleware chain:  Rate Limit → Request ID → Logging → CORS → route
    Routes:            /user*, /requiredCookieRoute, /entry, /reply, /ws, /health
    Exception handlers:
        BadTypeError / ValidationError / EntityValidationError → 400
        MissingSessionCookieError                               → 403
        NotFoundError                                           → 404
        DatabaseError / anything unexpected                     → 500

Lifecycle:
    Startup:   logging, configuration check, Database.connect()
    Shutdown:  Database.dispose()
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chirpboard import __version__
from chirpboard.config import Settings, settings as default_settings
from chirpboard.database import Database
from chirpboard.exceptions import (
    BadTypeError,
    ChirpboardError,
    DatabaseError,
    EntityValidationError,
    MissingSessionCookieError,
    NotFoundError,
    ValidationError,
)
from chirpboard.middleware.logging import RequestLoggingMiddleware
from chirpboard.middleware.rate_limit import RateLimitMiddleware
from chirpboard.middleware.request_id import RequestIDMiddleware, request_id_var
from chirpboard.routes import entries, health, live, users
from chirpboard.services.account_service import AccountService
from chirpboard.services.live_updates import LiveUpdateHub

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure root logging once at startup.

    Format: 2024-01-15T12:00:00 [INFO] chirpboard.routes.users: message
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings
    database: Database = app.state.database

    setup_logging(app_settings.log_level)
    logger.info("Chirpboard %s starting up...", __version__)

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    await database.connect()
    logger.info("Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port)

    yield

    logger.info("Chirpboard shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details: Optional[dict] = None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to JSON error responses.

    Internal details (SQL, stack traces) are logged server-side and never
    returned to the client.
    """

    @app.exception_handler(BadTypeError)
    async def handle_bad_type(request: Request, exc: BadTypeError):
        return JSONResponse(
            status_code=400,
            content=_error_body("bad_type", exc.message, {"fields": exc.fields}),
        )

    @app.exception_handler(EntityValidationError)
    async def handle_entity_validation(request: Request, exc: EntityValidationError):
        logger.info("[%s] %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(MissingSessionCookieError)
    async def handle_missing_cookie(request: Request, exc: MissingSessionCookieError):
        return JSONResponse(status_code=403, content=_error_body("forbidden", exc.message))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=_error_body("not_found", exc.message))

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(ChirpboardError)
    async def handle_app_error(request: Request, exc: ChirpboardError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=500, content=_error_body("server_error", exc.message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Assemble the application.

    Args:
        app_settings: configuration to use; defaults to the environment-loaded
                      module settings
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="Chirpboard API",
        description="Message board: accounts, entries, replies and a live entry feed.",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.database = Database.from_settings(app_settings)
    app.state.live_hub = LiveUpdateHub()
    app.state.account_service = AccountService(bcrypt_rounds=app_settings.bcrypt_rounds)

    # Executes in reverse order of addition: RateLimit runs first.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware, settings=app_settings)

    register_exception_handlers(app)

    app.include_router(users.router)
    app.include_router(entries.router)
    app.include_router(live.router)
    app.include_router(health.router)

    return app


app = create_app()
