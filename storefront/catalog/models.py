"""SQLAlchemy models for the product catalog.

Defines attributes and their vocabularies, products, variations and
the product-attribute-value junction that backs facet counting.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.infrastructure.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Attributes
# ============================================================================


class ProductAttribute(Base):
    """Attribute definition (e.g., color, size, thickness).

    Attributes:
        id: Attribute identifier.
        name: Display name (unique).
        slug: URL-facing key (unique).
        value_type: One of free-text, standardized, both.
        allow_multiple_values: Whether product values may list several
            comma-separated entries.
    """

    __tablename__ = "product_attributes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    value_type: Mapped[str] = mapped_column(String(20), nullable=False, default="free-text")
    allow_multiple_values: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    values: Mapped[list["AttributeValueRecord"]] = relationship(
        "AttributeValueRecord",
        back_populates="attribute",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<ProductAttribute(id={self.id}, slug={self.slug})>"


class AttributeValueRecord(Base):
    """Controlled-vocabulary value of an attribute."""

    __tablename__ = "attribute_values"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    attribute_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("product_attributes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    value: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    attribute: Mapped["ProductAttribute"] = relationship(
        "ProductAttribute", back_populates="values"
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<AttributeValueRecord(id={self.id}, value={self.value})>"


# ============================================================================
# Taxonomy
# ============================================================================


class Category(Base):
    """Product category."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    parent_slug: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Brand(Base):
    """Product brand."""

    __tablename__ = "brands"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)


class Collection(Base):
    """Brand collection (product line)."""

    __tablename__ = "collections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)


# ============================================================================
# Products
# ============================================================================


class Product(Base):
    """Product in the catalog.

    Attributes:
        id: Product identifier.
        name: Product name.
        slug: URL slug (unique).
        description: Long description, indexed for search.
        category_slug: Category the product belongs to.
        brand_slug: Brand of the product.
        collection_slug: Collection within the brand.
        is_active: Whether the product is listed.
        has_variations: Whether the product is sold through variations.
        price: Base price.
        product_attributes: Product-level attribute values as JSON text.
        created_at: Creation timestamp.
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    slug: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category_slug: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    brand_slug: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    collection_slug: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    has_variations: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    product_attributes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    # Relationships
    variations: Mapped[list["ProductVariation"]] = relationship(
        "ProductVariation",
        back_populates="product",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Product(id={self.id}, slug={self.slug})>"

    def to_dict(self) -> dict:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "category_slug": self.category_slug,
            "brand_slug": self.brand_slug,
            "collection_slug": self.collection_slug,
            "price": str(self.price),
            "has_variations": self.has_variations,
        }


class ProductVariation(Base):
    """Sellable variation of a product."""

    __tablename__ = "product_variations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sku: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    discount: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    sort: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    product: Mapped["Product"] = relationship("Product", back_populates="variations")
    attributes: Mapped[list["VariationAttributeRecord"]] = relationship(
        "VariationAttributeRecord",
        back_populates="variation",
        cascade="all, delete-orphan",
        order_by="VariationAttributeRecord.id",
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<ProductVariation(id={self.id}, sku={self.sku})>"


class VariationAttributeRecord(Base):
    """Attribute value of a variation.

    ``attribute_id`` is stored as text for historical reasons; it is
    parsed into an integer when variations are loaded.
    """

    __tablename__ = "variation_attributes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_variation_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("product_variations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    attribute_id: Mapped[str] = mapped_column(String(50), nullable=False)
    value: Mapped[str] = mapped_column(String(255), nullable=False)

    variation: Mapped["ProductVariation"] = relationship(
        "ProductVariation", back_populates="attributes"
    )


# ============================================================================
# Facet Index
# ============================================================================


class ProductAttributeValue(Base):
    """Junction row: product carries a standardized attribute value.

    Derived from product or variation attributes on every product save.
    """

    __tablename__ = "product_attribute_values"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    attribute_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("product_attributes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    value_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("attribute_values.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    __table_args__ = (
        UniqueConstraint("product_id", "attribute_id", "value_id", name="uq_product_attribute_value"),
        Index("ix_pav_product_attribute", "product_id", "attribute_id"),
        Index("ix_pav_attribute_value", "attribute_id", "value_id"),
    )


class ProductStoreLocation(Base):
    """Store location stocking a product."""

    __tablename__ = "product_store_locations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    store_location_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("product_id", "store_location_id", name="uq_product_store_location"),
    )
