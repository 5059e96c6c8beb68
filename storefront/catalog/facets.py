"""Facet computation.

For a filter context, computes every standardized attribute value that
is still reachable and how many distinct products each would match.
Each attribute's counts respect all other active attribute filters but
ignore the attribute's own selection, so a shopper can widen a choice
within one attribute without losing the alternatives.
"""

from collections.abc import Sequence

import structlog
from sqlalchemy import distinct, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from storefront.catalog.attributes import AttributeSnapshot
from storefront.catalog.models import (
    AttributeValueRecord,
    Product,
    ProductAttribute,
    ProductAttributeValue,
    ProductStoreLocation,
)
from storefront.domain.exceptions import CatalogQueryError
from storefront.domain.value_objects import Facet, FacetContext, FacetValue, ValueType

logger = structlog.get_logger()

FACETABLE_VALUE_TYPES = [ValueType.STANDARDIZED.value, ValueType.BOTH.value]


class FacetComputer:
    """Computes facet counts with a single grouped query.

    Example usage:
        computer = FacetComputer(session)
        facets = await computer.compute_facets(
            FacetContext(category_slug="flooring", attribute_filters={3: (12,)}),
            snapshot=await catalog.snapshot(),
        )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize computer with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def compute_facets(
        self,
        context: FacetContext,
        snapshot: AttributeSnapshot | None = None,
    ) -> list[Facet]:
        """Compute available attribute values for a filter context.

        Args:
            context: Category/brand/collection/location scope and the
                active attribute filters.
            snapshot: Attribute catalog snapshot. When given, filters on
                attributes missing from the catalog are dropped.

        Returns:
            Facets ordered by attribute name (case-insensitive, as in the
            attribute snapshot), each with values ordered by
            sort order then value. Attributes with no values are omitted.

        Raises:
            CatalogQueryError: If the store fails.
        """
        filters = context.active_filters()
        if snapshot is not None:
            filters = {
                attribute_id: value_ids
                for attribute_id, value_ids in filters.items()
                if attribute_id in snapshot.by_id
            }

        stmt = self._build_query(context, filters)

        try:
            result = await self.session.execute(stmt)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error(
                "Facet computation failed",
                category=context.category_slug,
                filter_count=len(filters),
                error=str(e),
            )
            raise CatalogQueryError("compute_facets", str(e)) from e

        facets = self._assemble(rows)
        logger.debug(
            "Facets computed",
            category=context.category_slug,
            filter_count=len(filters),
            facet_count=len(facets),
        )
        return facets

    def _build_query(self, context: FacetContext, filters: dict[int, tuple[int, ...]]):
        pav = ProductAttributeValue
        conditions = [
            Product.is_active.is_(True),
            AttributeValueRecord.is_active.is_(True),
            ProductAttribute.value_type.in_(FACETABLE_VALUE_TYPES),
        ]

        if context.category_slug:
            conditions.append(Product.category_slug == context.category_slug)
        if context.brand_slug:
            conditions.append(Product.brand_slug == context.brand_slug)
        if context.collection_slug:
            conditions.append(Product.collection_slug == context.collection_slug)

        if context.location_id is not None:
            conditions.append(
                select(ProductStoreLocation.id)
                .where(
                    ProductStoreLocation.product_id == pav.product_id,
                    ProductStoreLocation.store_location_id == context.location_id,
                )
                .exists()
            )

        # Rows of a filtered attribute skip that attribute's own constraint
        for attribute_id, value_ids in filters.items():
            matching = aliased(ProductAttributeValue)
            conditions.append(
                or_(
                    pav.attribute_id == attribute_id,
                    select(matching.id)
                    .where(
                        matching.product_id == pav.product_id,
                        matching.attribute_id == attribute_id,
                        matching.value_id.in_(value_ids),
                    )
                    .exists(),
                )
            )

        return (
            select(
                pav.attribute_id,
                ProductAttribute.name,
                ProductAttribute.slug,
                AttributeValueRecord.id,
                AttributeValueRecord.value,
                AttributeValueRecord.slug,
                AttributeValueRecord.sort_order,
                func.count(distinct(pav.product_id)).label("product_count"),
            )
            .join(Product, Product.id == pav.product_id)
            .join(ProductAttribute, ProductAttribute.id == pav.attribute_id)
            .join(
                AttributeValueRecord,
                (AttributeValueRecord.id == pav.value_id)
                & (AttributeValueRecord.attribute_id == pav.attribute_id),
            )
            .where(*conditions)
            .group_by(
                pav.attribute_id,
                ProductAttribute.name,
                ProductAttribute.slug,
                AttributeValueRecord.id,
                AttributeValueRecord.value,
                AttributeValueRecord.slug,
                AttributeValueRecord.sort_order,
            )
        )

    @staticmethod
    def _assemble(rows: Sequence) -> list[Facet]:
        grouped: dict[int, tuple[str, str, list[tuple[int, FacetValue]]]] = {}
        for attribute_id, name, slug, value_id, value, value_slug, sort_order, count in rows:
            if not count:
                continue
            entry = grouped.setdefault(attribute_id, (name, slug, []))
            entry[2].append(
                (sort_order, FacetValue(id=value_id, value=value, slug=value_slug, count=count))
            )

        facets = [
            Facet(
                attribute_id=attribute_id,
                attribute_name=name,
                attribute_slug=slug,
                values=tuple(
                    facet_value
                    for _, facet_value in sorted(values, key=lambda item: (item[0], item[1].value))
                ),
            )
            for attribute_id, (name, slug, values) in grouped.items()
            if values
        ]
        facets.sort(key=lambda facet: (facet.attribute_name.lower(), facet.attribute_id))
        return facets
