"""Facet API endpoints.

Provides the available attribute values (with product counts) for a
category, brand or collection listing and its active filters.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query

from storefront.api.dependencies import get_attribute_catalog, get_facet_computer
from storefront.api.schemas import (
    ErrorResponse,
    FacetListResponse,
    FacetSchema,
    FacetValueSchema,
)
from storefront.catalog.attributes import AttributeCatalog
from storefront.catalog.facets import FacetComputer
from storefront.catalog.parsing import parse_attribute_filters
from storefront.domain.value_objects import Facet, FacetContext

router = APIRouter(prefix="/facets", tags=["Facets"])

logger = structlog.get_logger()


def facet_to_schema(facet: Facet) -> FacetSchema:
    """Convert Facet value object to response schema."""
    return FacetSchema(
        attribute_id=facet.attribute_id,
        attribute_name=facet.attribute_name,
        attribute_slug=facet.attribute_slug,
        values=[
            FacetValueSchema(id=value.id, value=value.value, slug=value.slug, count=value.count)
            for value in facet.values
        ],
    )


@router.get(
    "",
    response_model=FacetListResponse,
    responses={503: {"model": ErrorResponse}},
    summary="Compute facets",
    description=(
        "Available attribute values and product counts. Each attribute's "
        "counts respect every other active attribute filter."
    ),
)
async def list_facets(
    computer: Annotated[FacetComputer, Depends(get_facet_computer)],
    attribute_catalog: Annotated[AttributeCatalog, Depends(get_attribute_catalog)],
    category: Annotated[str | None, Query(description="Category slug")] = None,
    brand: Annotated[str | None, Query(description="Brand slug")] = None,
    collection: Annotated[str | None, Query(description="Collection slug")] = None,
    location: Annotated[int | None, Query(gt=0, description="Store location ID")] = None,
    attribute_filters: Annotated[
        str | None,
        Query(
            alias="attributeFilters",
            description='JSON object of attribute ID to value IDs, e.g. {"3": [12, 14]}',
        ),
    ] = None,
) -> FacetListResponse:
    """Compute facets for a listing.

    Malformed attribute filters are ignored rather than rejected.

    Args:
        computer: Facet computer.
        attribute_catalog: Attribute catalog cache.
        category: Category slug.
        brand: Brand slug.
        collection: Collection slug.
        location: Store location ID.
        attribute_filters: Serialized attribute filters.

    Returns:
        Facets ordered by attribute name.
    """
    parsed = parse_attribute_filters(attribute_filters)
    if parsed.error is not None:
        logger.info(
            "Ignoring malformed attribute filters",
            error_code=parsed.error.code,
        )

    context = FacetContext(
        category_slug=category,
        brand_slug=brand,
        collection_slug=collection,
        location_id=location,
        attribute_filters=parsed.value,
    )
    snapshot = await attribute_catalog.snapshot()
    facets = await computer.compute_facets(context, snapshot=snapshot)
    return FacetListResponse(facets=[facet_to_schema(facet) for facet in facets])
