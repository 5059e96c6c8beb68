"""Search API endpoints.

Provides ranked product search and autocomplete suggestions.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from storefront.api.dependencies import get_search_service
from storefront.api.schemas import (
    ErrorResponse,
    ProductSummarySchema,
    SearchResponse,
    SuggestionListResponse,
    SuggestionSchema,
)
from storefront.catalog.models import Product
from storefront.catalog.search import SearchService, SearchSort, Suggestion
from storefront.infrastructure.config import settings

router = APIRouter(prefix="/search", tags=["Search"])


# ============================================================================
# Converters
# ============================================================================


def product_to_summary(product: Product) -> ProductSummarySchema:
    """Convert Product model to summary schema."""
    return ProductSummarySchema(
        id=product.id,
        name=product.name,
        slug=product.slug,
        price=product.price,
        category_slug=product.category_slug,
        brand_slug=product.brand_slug,
        collection_slug=product.collection_slug,
        has_variations=product.has_variations,
    )


def suggestion_to_schema(suggestion: Suggestion) -> SuggestionSchema:
    return SuggestionSchema(type=suggestion.type, text=suggestion.text, slug=suggestion.slug)


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=SearchResponse,
    responses={503: {"model": ErrorResponse}},
    summary="Search products",
)
async def search_products(
    service: Annotated[SearchService, Depends(get_search_service)],
    q: Annotated[str, Query(description="Search text")] = "",
    sort: Annotated[SearchSort, Query(description="Result ordering")] = SearchSort.RELEVANT,
    limit: Annotated[int | None, Query(ge=1, le=100)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
    prefix: Annotated[bool, Query(description="Treat the last term as a prefix")] = False,
) -> SearchResponse:
    """Search active products.

    Text shorter than the minimum query length yields an empty page.

    Args:
        service: Search service.
        q: Search text.
        sort: Explicit ordering; relevance applies after it.
        limit: Page size.
        offset: Results to skip.
        prefix: Prefix-match the last term.

    Returns:
        Page of products.
    """
    page_size = limit or settings.search_default_limit
    page = await service.search_products(
        q, sort=sort, limit=page_size, offset=offset, prefix_mode=prefix
    )
    return SearchResponse(
        items=[product_to_summary(product) for product in page.items],
        total=page.total,
        limit=page_size,
        offset=offset,
        sort=sort,
    )


@router.get(
    "/suggestions",
    response_model=SuggestionListResponse,
    responses={503: {"model": ErrorResponse}},
    summary="Autocomplete suggestions",
)
async def search_suggestions(
    service: Annotated[SearchService, Depends(get_search_service)],
    q: Annotated[str, Query(description="Partial search text")] = "",
    limit: Annotated[int | None, Query(ge=1, le=50)] = None,
) -> SuggestionListResponse:
    """Suggest categories, brands, collections and products for partial text."""
    suggestions = await service.suggest(q, limit=limit)
    return SuggestionListResponse(
        suggestions=[suggestion_to_schema(suggestion) for suggestion in suggestions]
    )


@router.get(
    "/popular",
    response_model=SuggestionListResponse,
    responses={503: {"model": ErrorResponse}},
    summary="Popular search terms",
)
async def popular_terms(
    service: Annotated[SearchService, Depends(get_search_service)],
    limit: Annotated[int, Query(ge=1, le=50)] = 5,
) -> SuggestionListResponse:
    """Terms shown before the shopper starts typing."""
    suggestions = await service.popular_terms(limit=limit)
    return SuggestionListResponse(
        suggestions=[suggestion_to_schema(suggestion) for suggestion in suggestions]
    )
