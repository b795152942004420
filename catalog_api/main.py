"""Catalog API main application module.

This module builds the FastAPI application and configures core
middleware, routers, exception handlers and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog_api.api.categories import router as categories_router
from catalog_api.api.errors import status_for
from catalog_api.api.health import router as health_router
from catalog_api.api.middleware import setup_middleware
from catalog_api.api.products import router as products_router
from catalog_api.api.users import router as users_router
from catalog_api.domain.exceptions import DomainError
from catalog_api.infrastructure.config import Settings, settings
from catalog_api.infrastructure.image_storage import ImageStorage, build_image_storage
from catalog_api.infrastructure.logging_config import configure_logging
from catalog_api.infrastructure.record_store import InMemoryRecordStore, RecordStore
from catalog_api.infrastructure.sql_record_store import SqlAlchemyRecordStore

logger = structlog.get_logger()


def build_store(config: Settings) -> RecordStore:
    """Record store selected by ``store_backend``."""
    if config.store_backend == "database":
        return SqlAlchemyRecordStore.from_url(config.database_url, echo=config.debug)
    return InMemoryRecordStore()


def create_app(
    store: RecordStore | None = None,
    image_storage: ImageStorage | None = None,
    config: Settings = settings,
) -> FastAPI:
    """Build the application.

    Args:
        store: Record store; built from settings when omitted.
        image_storage: Upload adapter; built from settings when omitted.
        config: Settings to use.

    Returns:
        Configured FastAPI application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(
            "Starting catalog API",
            version=config.api_version,
            debug=config.debug,
            store_backend=config.store_backend,
        )

        yield

        logger.info("Shutting down catalog API")
        await app.state.image_storage.close()
        await app.state.store.close()

    app = FastAPI(
        title="Catalog API",
        description="Category tree and product catalog with integrity checks",
        version=config.api_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.store = store or build_store(config)
    app.state.image_storage = image_storage or build_image_storage(config)

    # CORS middleware (must be added before custom middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request ID, credentials, error handling
    setup_middleware(app)

    app.include_router(health_router, tags=["Health"])
    app.include_router(categories_router)
    app.include_router(products_router)
    app.include_router(users_router)

    register_exception_handlers(app)
    return app


# ============================================================================
# Custom Exception Handlers
# ============================================================================


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error with the same body shape."""

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """Handle HTTP exceptions with consistent format."""
        request_id = getattr(request.state, "request_id", None)

        detail = exc.detail
        if isinstance(detail, dict):
            error_code = detail.get("error_code", "ERROR")
            message = detail.get("message", str(detail))
            details = detail.get("details", {})
        else:
            error_code = "ERROR"
            message = str(detail)
            details = {}

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error_code": error_code,
                "message": message,
                "details": details,
                "request_id": request_id,
            },
            headers=exc.headers,
        )

    @app.exception_handler(DomainError)
    async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
        """Render domain errors raised while reading a request body."""
        return JSONResponse(
            status_code=status_for(exc.error_code),
            content={
                "error_code": exc.error_code,
                "message": exc.message,
                "details": exc.details,
                "request_id": getattr(request.state, "request_id", None),
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report malformed request bodies as VALIDATION_ERROR."""
        errors = [
            {"field": ".".join(str(part) for part in err.get("loc", ())), "reason": err.get("msg")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={
                "error_code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": {"errors": errors},
                "request_id": getattr(request.state, "request_id", None),
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle uncaught exceptions with consistent format."""
        request_id = getattr(request.state, "request_id", None)

        logger.exception(
            "Unhandled exception in handler",
            path=request.url.path,
            method=request.method,
            error=str(exc),
        )

        return JSONResponse(
            status_code=500,
            content={
                "error_code": "INTERNAL_ERROR",
                "message": "An internal error occurred",
                "details": {},
                "request_id": request_id,
            },
        )


configure_logging(settings.log_level)
app = create_app()
