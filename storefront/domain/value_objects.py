"""Value Objects for the catalog domain.

Closed, validated shapes for attributes, variations and facets.
Everything entering the resolver or the facet computer has already
been converted into one of these types at the storage boundary.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from storefront.domain.base import ValueObject


# ============================================================================
# Attributes
# ============================================================================


class ValueType(str, Enum):
    """How an attribute's values are authored.

    Standardized attributes draw values from a controlled vocabulary;
    free-text attributes accept anything; ``both`` allows either.
    """

    FREE_TEXT = "free-text"
    STANDARDIZED = "standardized"
    BOTH = "both"

    @property
    def is_facetable(self) -> bool:
        """Whether values of this type take part in facet counting."""
        return self in (ValueType.STANDARDIZED, ValueType.BOTH)


@dataclass(frozen=True)
class Attribute(ValueObject):
    """Catalog attribute definition (e.g., color, size)."""

    id: int
    slug: str
    name: str
    value_type: ValueType = ValueType.FREE_TEXT
    allow_multiple_values: bool = False


@dataclass(frozen=True)
class AttributeValue(ValueObject):
    """One value of a standardized attribute vocabulary."""

    id: int
    attribute_id: int
    value: str
    slug: str | None = None
    sort_order: int = 0
    is_active: bool = True


@dataclass(frozen=True)
class AttributeAssignment(ValueObject):
    """Product-level attribute value, as displayed on the product page.

    The value may hold several comma-separated entries when the
    attribute allows multiple values.
    """

    attribute_id: int
    value: str


# ============================================================================
# Variations
# ============================================================================


@dataclass(frozen=True)
class VariationAttribute(ValueObject):
    """Attribute value carried by one variation."""

    attribute_id: int
    value: str


@dataclass(frozen=True)
class Variation(ValueObject):
    """Sellable variant of a product.

    Attributes:
        id: Variation identifier.
        product_id: Owning product.
        sku: Stock keeping unit, unique across the catalog.
        price: Variation price.
        discount: Optional discount percentage.
        sort: Optional display position.
        attributes: Attribute values defining this variation.
    """

    id: int
    product_id: int
    sku: str
    price: Decimal = Decimal("0")
    discount: Decimal | None = None
    sort: int | None = None
    attributes: tuple[VariationAttribute, ...] = ()

    @property
    def attribute_map(self) -> dict[int, str]:
        """Attribute id to value mapping of this variation."""
        return {attr.attribute_id: attr.value for attr in self.attributes}


# ============================================================================
# Facets
# ============================================================================


@dataclass(frozen=True)
class FacetContext(ValueObject):
    """Filter context for facet computation.

    Attributes:
        category_slug: Restrict to one category.
        brand_slug: Restrict to one brand.
        collection_slug: Restrict to one collection.
        location_id: Restrict to products stocked at a store location.
        attribute_filters: Attribute id to accepted value ids. Within one
            attribute the values are alternatives (OR); across attributes
            every constraint must hold (AND).
    """

    category_slug: str | None = None
    brand_slug: str | None = None
    collection_slug: str | None = None
    location_id: int | None = None
    attribute_filters: dict[int, tuple[int, ...]] = field(default_factory=dict)

    def active_filters(self) -> dict[int, tuple[int, ...]]:
        """Attribute filters with at least one accepted value."""
        return {
            attribute_id: value_ids
            for attribute_id, value_ids in self.attribute_filters.items()
            if value_ids
        }


@dataclass(frozen=True)
class FacetValue(ValueObject):
    """A selectable value and the number of products it would match."""

    id: int
    value: str
    slug: str | None
    count: int


@dataclass(frozen=True)
class Facet(ValueObject):
    """An attribute with its currently available values."""

    attribute_id: int
    attribute_name: str
    attribute_slug: str
    values: tuple[FacetValue, ...]
