"""API schemas for the storefront facets API.

Pydantic models for request/response validation and serialization.
Facet and variation payloads use camelCase keys on the wire.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from storefront.catalog.search import SearchSort, SuggestionType


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] | dict = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)


# ============================================================================
# Facet Schemas
# ============================================================================


class FacetValueSchema(CamelModel):
    """Attribute value available under the current filters."""

    id: int = Field(..., description="Attribute value ID")
    value: str = Field(..., description="Display value")
    slug: str | None = Field(default=None, description="Value slug")
    count: int = Field(..., description="Distinct products matching this value")


class FacetSchema(CamelModel):
    """Attribute with its available values."""

    attribute_id: int = Field(..., alias="attributeId")
    attribute_name: str = Field(..., alias="attributeName")
    attribute_slug: str = Field(..., alias="attributeSlug")
    values: list[FacetValueSchema] = Field(default_factory=list)


class FacetListResponse(BaseModel):
    """Facets for a filter context."""

    facets: list[FacetSchema] = Field(default_factory=list)


# ============================================================================
# Search Schemas
# ============================================================================


class ProductSummarySchema(BaseModel):
    """Product as listed in search results."""

    id: int
    name: str
    slug: str
    price: Decimal
    category_slug: str | None = None
    brand_slug: str | None = None
    collection_slug: str | None = None
    has_variations: bool = False


class SearchResponse(BaseModel):
    """Page of ranked search results."""

    items: list[ProductSummarySchema] = Field(default_factory=list)
    total: int = Field(default=0, description="Total matching products")
    limit: int = Field(..., description="Page size")
    offset: int = Field(..., description="Results skipped")
    sort: SearchSort = Field(..., description="Applied ordering")


class SuggestionSchema(BaseModel):
    """Autocomplete entry."""

    type: SuggestionType
    text: str
    slug: str


class SuggestionListResponse(BaseModel):
    """Autocomplete entries."""

    suggestions: list[SuggestionSchema] = Field(default_factory=list)


# ============================================================================
# Variation Schemas
# ============================================================================


class VariationAttributeSchema(CamelModel):
    attribute_id: int = Field(..., alias="attributeId")
    value: str


class VariationSchema(CamelModel):
    """Sellable variation."""

    id: int
    sku: str
    price: Decimal
    discount: Decimal | None = None
    attributes: list[VariationAttributeSchema] = Field(default_factory=list)


class AttributeOptionSchema(CamelModel):
    """Values offered for one attribute on the product page."""

    attribute_id: int = Field(..., alias="attributeId")
    attribute_slug: str = Field(..., alias="attributeSlug")
    values: list[str] = Field(default_factory=list)


class VariationViewResponse(CamelModel):
    """Resolved selection for a product page."""

    product_slug: str = Field(..., alias="productSlug")
    selection: dict[int, str] = Field(default_factory=dict)
    params: dict[str, str] = Field(default_factory=dict)
    is_default: bool = Field(..., alias="isDefault")
    variation: VariationSchema | None = None
    options: list[AttributeOptionSchema] = Field(default_factory=list)


class SelectVariationRequest(CamelModel):
    """Change one attribute of the current selection."""

    attribute_id: int = Field(..., alias="attributeId", gt=0)
    value: str = Field(..., min_length=1)
    params: dict[str, str] = Field(
        default_factory=dict, description="Current slug-keyed parameters"
    )


class SelectVariationResponse(CamelModel):
    """Outcome of a selection change."""

    changed: bool
    params: dict[str, str] = Field(default_factory=dict)
    variation: VariationSchema | None = None
