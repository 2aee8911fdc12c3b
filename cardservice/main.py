"""
Card Service — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes logging setup, middleware registration, error mapping and
       route mounting in one place.
How:   create_app(settings, store) returns a configured FastAPI instance bound
       to an already-connected CardStore. There is no module-level app: the
       store must be connected (and the connection must have succeeded)
       before the app exists. See cardservice.server for the startup order.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Access Logging           │
    │                                                     │
    │  Routes:                                            │
    │    GET /test            GET /template/{id}          │
    │    GET /cards           POST /cards                 │
    │    GET /cards/{id}      PUT /cards/{id}             │
    │    DELETE /cards/{id}                               │
    │                                                     │
    │  Exception Handlers → {"error": "<message>"}        │
    │    InputParseError 400 │ ValidationError 400        │
    │    NotFoundError 404   │ StoreOperationError 400    │
    └─────────────────────────────────────────────────────┘

app.state:
    settings  : the Settings instance passed in
    store     : the CardStore handle shared by all requests
    templates : Jinja2 environment for the HTML detail view
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates

from cardservice import __version__
from cardservice.config import Settings
from cardservice.database import CardStore
from cardservice.exceptions import (
    CardServiceError,
    InputParseError,
    NotFoundError,
    StoreOperationError,
    ValidationError,
)
from cardservice.middleware.logging import RequestLoggingMiddleware
from cardservice.middleware.request_id import RequestIDLogFilter, RequestIDMiddleware
from cardservice.routes import cards, diagnostics, template

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(request_id)s] %(name)s: %(message)s"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure the root logger once for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] [a1b2c3d4] cardservice.database: <message>
    The bracketed id is the current request id, "-" outside a request.
    Called by the entry point before the store connection is attempted, so
    connection failures are logged in the same format.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Our own access middleware replaces uvicorn's access log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup logging and store release on shutdown.

    The store connection is opened by the server lifecycle, not here: a
    failed connection must stop the process before it listens. Closing it
    here runs inside uvicorn's drain, after in-flight requests are done.
    """
    settings: Settings = app.state.settings
    logger.info("=" * 60)
    logger.info("Card Service %s starting up", __version__)
    logger.info(
        "Store: %s.%s", settings.database_name, settings.collection_name
    )
    logger.info("httpServer | Host: %s", settings.listen_address)
    logger.info("=" * 60)

    yield

    logger.info("httpServer | Service stopping")
    store: CardStore = app.state.store
    await store.close()
    logger.info("Store connection closed")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, exc: CardServiceError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=exc.to_response())


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map CardServiceError subclasses to HTTP status codes.

    Every body has the same shape: {"error": "<message>"}. The context dict
    of each error is logged, never returned.

        InputParseError      → 400
        ValidationError      → 400
        StoreOperationError  → 400
        NotFoundError        → 404
        CardServiceError     → 500 (catch-all for our own errors)
        Exception            → 500 (unexpected; traceback logged)
    """

    @app.exception_handler(InputParseError)
    async def handle_input_parse_error(request: Request, exc: InputParseError):
        logger.warning("Input parse error: %s", exc.message)
        return _error_response(400, exc)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("Validation error: %s | Context: %s", exc.message, exc.context)
        return _error_response(400, exc)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        logger.info("Not found: %s", exc.message)
        return _error_response(404, exc)

    @app.exception_handler(StoreOperationError)
    async def handle_store_operation_error(request: Request, exc: StoreOperationError):
        logger.error("Store error: %s | Context: %s", exc.message, exc.context)
        return _error_response(400, exc)

    @app.exception_handler(CardServiceError)
    async def handle_card_service_error(request: Request, exc: CardServiceError):
        logger.error("%s: %s", exc.kind, exc.message)
        return _error_response(500, exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "An unexpected error occurred"},
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Settings, store: CardStore) -> FastAPI:
    """
    Assemble the application around a connected store.

    Returns:
        FastAPI instance serving exactly the seven card routes. OpenAPI and
        docs endpoints are disabled and trailing-slash redirects are off, so
        any other path gets the framework's default 404.
    """
    app = FastAPI(
        title="Card Service",
        description="CRUD over rectangle cards stored in MongoDB.",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        redirect_slashes=False,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.templates = Jinja2Templates(directory=settings.template_dir)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → route
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(diagnostics.router)
    app.include_router(template.router)
    app.include_router(cards.router)

    return app
