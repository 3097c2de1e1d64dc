# catalyst_core/main.py
"""
Entry point for the Catalyst Core HTTP API.

This module creates the FastAPI application, wires up logging, tracing and
middleware, maps domain errors onto HTTP responses and mounts the routers
under the configured prefix.

Intended usage:
    uvicorn catalyst_core.main:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional, Type

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalyst_core.config import Settings, get_settings
from catalyst_core.db.session import init_db
from catalyst_core.errors import (
    ConstraintViolation,
    DomainError,
    DuplicateFact,
    InvalidPeriod,
    NotFoundError,
    RangeError,
    ReferentialIntegrityError,
    StorageUnavailable,
)
from catalyst_core.logging_config import configure_logging
from catalyst_core.observability import setup_observability
from catalyst_core.routers import entities, frameworks, measurements, metrics, periods, sources, tags
from catalyst_core.schemas.common import ErrorDetail, ErrorResponse

logger = structlog.get_logger()

# Most specific class first; NotFoundError must win over its parent.
ERROR_STATUS: Dict[Type[DomainError], int] = {
    NotFoundError: 404,
    ReferentialIntegrityError: 409,
    DuplicateFact: 409,
    ConstraintViolation: 422,
    InvalidPeriod: 422,
    RangeError: 422,
    StorageUnavailable: 503,
}


def status_for(exc: DomainError) -> int:
    for error_cls, status_code in ERROR_STATUS.items():
        if isinstance(exc, error_cls):
            return status_code
    return 400


def error_response(exc: DomainError) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorDetail(code=exc.code, message=exc.message, details=exc.details or None)
    )
    return JSONResponse(status_code=status_for(exc), content=body.model_dump(mode="json"))


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    docs_enabled = settings.ENABLE_DOCS
    api_root = settings.api_root

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        # Create missing tables on the configured database.
        init_db()
        logger.info(
            "api_started",
            version=settings.APP_VERSION,
            environment=settings.APP_ENV.value,
            api_root=api_root,
        )
        yield
        logger.info("api_stopped")

    app = FastAPI(
        title="Catalyst Core Measurement Store",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        openapi_url="/openapi.json" if docs_enabled else None,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if setup_observability(app):
        logger.info("tracing_enabled", service=settings.OTEL_SERVICE_NAME)

    @app.exception_handler(DomainError)
    async def _on_domain_error(request: Request, exc: DomainError) -> JSONResponse:
        logger.info(
            "request_rejected",
            path=request.url.path,
            error_code=exc.code,
            message=exc.message,
        )
        return error_response(exc)

    @app.get("/health", tags=["system"])
    async def health() -> dict:
        return {
            "status": "ok",
            "version": settings.APP_VERSION,
            "api_root": api_root,
        }

    for module in (entities, frameworks, metrics, sources, tags, periods, measurements):
        app.include_router(module.router, prefix=api_root)

    return app


# Default application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("catalyst_core.main:app", host="0.0.0.0", port=8000)
