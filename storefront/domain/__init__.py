"""Domain layer - value objects and exceptions.

Example usage:
    from storefront.domain import FacetContext, Variation, VariationAttribute

    context = FacetContext(category_slug="flooring", attribute_filters={3: (12, 14)})
"""

from storefront.domain.base import ValueObject
from storefront.domain.exceptions import (
    AttributeCatalogUnavailableError,
    CatalogQueryError,
    DomainError,
    ProductNotFoundError,
)
from storefront.domain.value_objects import (
    Attribute,
    AttributeAssignment,
    AttributeValue,
    Facet,
    FacetContext,
    FacetValue,
    ValueType,
    Variation,
    VariationAttribute,
)

__all__ = [
    # Base
    "ValueObject",
    # Value objects
    "Attribute",
    "AttributeAssignment",
    "AttributeValue",
    "Facet",
    "FacetContext",
    "FacetValue",
    "ValueType",
    "Variation",
    "VariationAttribute",
    # Exceptions
    "AttributeCatalogUnavailableError",
    "CatalogQueryError",
    "DomainError",
    "ProductNotFoundError",
]
