"""Storefront facets API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.api.facets import router as facets_router
from storefront.api.health import router as health_router
from storefront.api.middleware import setup_middleware
from storefront.api.products import router as products_router
from storefront.api.search import router as search_router
from storefront.catalog.attributes import AttributeCatalog
from storefront.catalog.repository import ProductRepository
from storefront.domain.exceptions import (
    AttributeCatalogUnavailableError,
    CatalogQueryError,
    DomainError,
    ProductNotFoundError,
)
from storefront.infrastructure import database
from storefront.infrastructure.config import settings
from storefront.infrastructure.database import async_session_factory
from storefront.infrastructure.logging import configure_logging

configure_logging(settings)

logger = structlog.get_logger()


async def load_attribute_catalog():
    """Load attributes and values in a dedicated session."""
    async with async_session_factory() as session:
        return await ProductRepository(session).load_attributes()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    # Startup
    logger.info(
        "Starting storefront facets API",
        version=settings.api_version,
        debug=settings.debug,
        attribute_cache_ttl_seconds=settings.attribute_cache_ttl_seconds,
    )

    yield

    # Shutdown
    logger.info("Shutting down storefront facets API")
    await database.engine.dispose()


app = FastAPI(
    title="Storefront Facets API",
    description="Faceted filtering, variation resolution and product search",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.attribute_catalog = AttributeCatalog(loader=load_attribute_catalog)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request ID, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(facets_router)
app.include_router(search_router)
app.include_router(products_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


DOMAIN_ERROR_STATUS: dict[type[DomainError], tuple[int, str]] = {
    ProductNotFoundError: (status.HTTP_404_NOT_FOUND, "PRODUCT_NOT_FOUND"),
    CatalogQueryError: (status.HTTP_503_SERVICE_UNAVAILABLE, "CATALOG_UNAVAILABLE"),
    AttributeCatalogUnavailableError: (
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "ATTRIBUTE_CATALOG_UNAVAILABLE",
    ),
}


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    """Map domain errors to HTTP responses with consistent format."""
    request_id = getattr(request.state, "request_id", None)
    status_code, error_code = DOMAIN_ERROR_STATUS.get(
        type(exc), (status.HTTP_400_BAD_REQUEST, "DOMAIN_ERROR")
    )

    logger.warning(
        "Domain error",
        path=request.url.path,
        error_code=error_code,
        error=exc.message,
    )

    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": exc.message,
            "details": exc.details,
            "request_id": request_id,
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "request_id": request_id,
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request, exc):
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
            "details": [],
            "request_id": request_id,
        },
    )
