"""Product repository for database operations.

Loads products with their variations, feeds the attribute catalog, and
keeps the product-attribute-value junction in step with product data.
"""

from collections.abc import Iterable, Sequence

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.catalog.attributes import AttributeSnapshot
from storefront.catalog.models import (
    AttributeValueRecord,
    Product,
    ProductAttribute,
    ProductAttributeValue,
    ProductVariation,
)
from storefront.catalog.parsing import (
    parse_product_attributes,
    parse_variation_attributes,
    split_multi_value,
)
from storefront.domain.value_objects import (
    Attribute,
    AttributeAssignment,
    AttributeValue,
    ValueType,
    Variation,
)

logger = structlog.get_logger()


class ProductRepository:
    """Repository for Product database operations.

    Example usage:
        async with async_session_factory() as session:
            repo = ProductRepository(session)
            product = await repo.get_by_slug("oak-classic")
            variations = repo.to_variations(product)
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def save(self, product: Product) -> Product:
        """Save a product to database.

        Args:
            product: Product to save.

        Returns:
            Saved product.
        """
        self.session.add(product)
        await self.session.flush()
        return product

    async def get_by_slug(
        self,
        slug: str,
        include_variations: bool = True,
        active_only: bool = True,
    ) -> Product | None:
        """Get product by slug.

        Args:
            slug: Product slug.
            include_variations: Whether to eagerly load variations and
                their attributes.
            active_only: Ignore inactive products.

        Returns:
            Product if found, None otherwise.
        """
        query = select(Product).where(Product.slug == slug)
        if active_only:
            query = query.where(Product.is_active.is_(True))
        if include_variations:
            query = query.options(
                selectinload(Product.variations).selectinload(ProductVariation.attributes)
            )

        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    @staticmethod
    def to_variations(product: Product) -> list[Variation]:
        """Convert a loaded product's variations into domain values.

        Variations are ordered by their sort position (unsorted last),
        then by id. Attribute rows with a non-numeric id or no value are
        skipped.
        """
        ordered = sorted(
            product.variations,
            key=lambda v: (v.sort is None, v.sort if v.sort is not None else 0, v.id),
        )
        variations: list[Variation] = []
        for record in ordered:
            attributes, skipped = parse_variation_attributes(
                (attr.attribute_id, attr.value) for attr in record.attributes
            )
            if skipped:
                logger.debug(
                    "Skipped malformed variation attributes",
                    variation_id=record.id,
                    attribute_ids=skipped,
                )
            variations.append(
                Variation(
                    id=record.id,
                    product_id=record.product_id,
                    sku=record.sku,
                    price=record.price,
                    discount=record.discount,
                    sort=record.sort,
                    attributes=attributes,
                )
            )
        return variations

    async def load_attributes(self) -> tuple[list[Attribute], list[AttributeValue]]:
        """Load every attribute and attribute value.

        Serves as the attribute catalog loader.

        Returns:
            Tuple of (attributes, values).
        """
        attribute_rows = (await self.session.execute(select(ProductAttribute))).scalars().all()
        value_rows = (await self.session.execute(select(AttributeValueRecord))).scalars().all()

        attributes = []
        for row in attribute_rows:
            try:
                value_type = ValueType(row.value_type)
            except ValueError:
                logger.warning(
                    "Unknown attribute value type",
                    attribute_id=row.id,
                    value_type=row.value_type,
                )
                value_type = ValueType.FREE_TEXT
            attributes.append(
                Attribute(
                    id=row.id,
                    slug=row.slug,
                    name=row.name,
                    value_type=value_type,
                    allow_multiple_values=row.allow_multiple_values,
                )
            )

        values = [
            AttributeValue(
                id=row.id,
                attribute_id=row.attribute_id,
                value=row.value,
                slug=row.slug,
                sort_order=row.sort_order,
                is_active=row.is_active,
            )
            for row in value_rows
        ]
        return attributes, values

    @staticmethod
    def facet_assignments(
        product: Product,
        variations: Sequence[Variation] = (),
    ) -> list[AttributeAssignment]:
        """Attribute values a product contributes to facet counting.

        Products sold through variations contribute their variations'
        values; other products contribute their product-level values.
        """
        if product.has_variations:
            return [
                AttributeAssignment(attribute_id=attr.attribute_id, value=attr.value)
                for variation in variations
                for attr in variation.attributes
            ]
        return list(parse_product_attributes(product.product_attributes).value)

    async def sync_attribute_values(
        self,
        product_id: int,
        assignments: Iterable[AttributeAssignment],
        snapshot: AttributeSnapshot,
    ) -> int:
        """Replace a product's junction rows.

        Only standardized (or both) attributes are indexed, and only
        values present in the active vocabulary. Multi-value attributes
        are split on commas.

        Args:
            product_id: Product to re-index.
            assignments: Attribute values the product carries.
            snapshot: Attribute catalog snapshot for value id lookup.

        Returns:
            Number of junction rows written.
        """
        seen: set[tuple[int, int]] = set()
        rows: list[ProductAttributeValue] = []

        for assignment in assignments:
            attribute = snapshot.by_id.get(assignment.attribute_id)
            if attribute is None or not attribute.value_type.is_facetable:
                continue

            entries = (
                split_multi_value(assignment.value)
                if attribute.allow_multiple_values
                else [assignment.value.strip()]
            )
            for entry in entries:
                value_id = snapshot.value_id(attribute.id, entry)
                if value_id is None:
                    logger.debug(
                        "Attribute value not in vocabulary",
                        product_id=product_id,
                        attribute_id=attribute.id,
                        value=entry,
                    )
                    continue
                if (attribute.id, value_id) in seen:
                    continue
                seen.add((attribute.id, value_id))
                rows.append(
                    ProductAttributeValue(
                        product_id=product_id,
                        attribute_id=attribute.id,
                        value_id=value_id,
                    )
                )

        await self.session.execute(
            delete(ProductAttributeValue).where(ProductAttributeValue.product_id == product_id)
        )
        self.session.add_all(rows)
        await self.session.flush()

        logger.info(
            "Product attribute values synced",
            product_id=product_id,
            row_count=len(rows),
        )
        return len(rows)
