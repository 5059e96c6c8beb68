"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from storefront.api.facets import router as facets_router
from storefront.api.health import router as health_router
from storefront.api.products import router as products_router
from storefront.api.search import router as search_router

__all__ = [
    "facets_router",
    "health_router",
    "products_router",
    "search_router",
]
