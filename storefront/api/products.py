"""Product page endpoints.

Resolves attribute selections (given as slug-keyed query parameters)
to product variations.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from storefront.api.dependencies import get_catalog_service
from storefront.api.schemas import (
    AttributeOptionSchema,
    ErrorResponse,
    SelectVariationRequest,
    SelectVariationResponse,
    VariationAttributeSchema,
    VariationSchema,
    VariationViewResponse,
)
from storefront.catalog.service import CatalogService
from storefront.domain.value_objects import Variation

router = APIRouter(prefix="/products", tags=["Products"])


def variation_to_schema(variation: Variation | None) -> VariationSchema | None:
    """Convert Variation value object to response schema."""
    if variation is None:
        return None
    return VariationSchema(
        id=variation.id,
        sku=variation.sku,
        price=variation.price,
        discount=variation.discount,
        attributes=[
            VariationAttributeSchema(attribute_id=attr.attribute_id, value=attr.value)
            for attr in variation.attributes
        ],
    )


@router.get(
    "/{slug}/variation",
    response_model=VariationViewResponse,
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Resolve variation selection",
    description=(
        "Query parameters are attribute slugs mapped to selected values, "
        "e.g. ?color=Natural&thickness=8 mm. Without a selection the "
        "product's default selection is returned."
    ),
)
async def get_variation(
    slug: str,
    request: Request,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> VariationViewResponse:
    """Resolve the variation selected by query parameters.

    Args:
        slug: Product slug.
        request: Incoming request (query parameters carry the selection).
        service: Catalog service.

    Returns:
        Selection, canonical parameters and the matched variation.
    """
    view = await service.get_variation_view(slug, dict(request.query_params))
    snapshot = view.snapshot
    return VariationViewResponse(
        product_slug=view.product.slug,
        selection=view.selection,
        params=view.params,
        is_default=view.is_default,
        variation=variation_to_schema(view.variation),
        options=[
            AttributeOptionSchema(
                attribute_id=attribute_id,
                attribute_slug=(snapshot.id_to_slug(attribute_id) if snapshot else None)
                or str(attribute_id),
                values=values,
            )
            for attribute_id, values in view.options.items()
        ],
    )


@router.post(
    "/{slug}/variation/select",
    response_model=SelectVariationResponse,
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Change one attribute of a selection",
)
async def select_variation(
    slug: str,
    body: SelectVariationRequest,
    service: Annotated[CatalogService, Depends(get_catalog_service)],
) -> SelectVariationResponse:
    """Apply a single-attribute change to the current selection.

    A change that matches no variation returns the parameters unchanged
    with ``changed`` set to false.
    """
    outcome = await service.select_variation(
        slug, body.attribute_id, body.value, body.params
    )
    return SelectVariationResponse(
        changed=outcome.changed,
        params=outcome.params,
        variation=variation_to_schema(outcome.variation),
    )
