"""Catalog service for product page operations.

High-level service that combines the repository, the attribute catalog
and the variation resolver.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.catalog.attributes import AttributeCatalog, AttributeSnapshot
from storefront.catalog.models import Product
from storefront.catalog.parsing import split_multi_value
from storefront.catalog.repository import ProductRepository
from storefront.catalog.variations import (
    VariationResolver,
    VariationSelector,
    selection_to_params,
    sort_variations_for_display,
)
from storefront.domain.exceptions import ProductNotFoundError
from storefront.domain.value_objects import AttributeAssignment, Variation

logger = structlog.get_logger()


@dataclass
class VariationView:
    """Resolved selection state of a product page.

    Attributes:
        product: The product.
        selection: Attribute id to selected value.
        params: Slug-keyed parameters reflecting the selection.
        variation: Matching variation, or None.
        is_default: Whether the selection is the product's default.
        options: Attribute id to offered values, in display order.
        snapshot: Catalog snapshot used for slug translation.
    """

    product: Product
    selection: dict[int, str]
    params: dict[str, str]
    variation: Variation | None
    is_default: bool
    options: dict[int, list[str]] = field(default_factory=dict)
    snapshot: AttributeSnapshot | None = None


@dataclass
class SelectionOutcome:
    """Result of changing one attribute on a product page."""

    changed: bool
    params: dict[str, str]
    variation: Variation | None


def validate_assignments(
    assignments: Iterable[AttributeAssignment],
    snapshot: AttributeSnapshot,
) -> list[str]:
    """Report values of standardized attributes missing from the vocabulary.

    Args:
        assignments: Attribute values to check.
        snapshot: Attribute catalog snapshot.

    Returns:
        Human-readable error messages; empty when everything is valid.
    """
    errors: list[str] = []
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
            if snapshot.value_id(attribute.id, entry) is None:
                errors.append(f"Value '{entry}' is not allowed for attribute '{attribute.name}'")
    return errors


class CatalogService:
    """Service for product page and catalog maintenance operations.

    Example usage:
        service = CatalogService(session, attribute_catalog)
        view = await service.get_variation_view("oak-classic", {"color": "natural"})
    """

    def __init__(self, session: AsyncSession, attribute_catalog: AttributeCatalog) -> None:
        """Initialize service.

        Args:
            session: Async SQLAlchemy session.
            attribute_catalog: Shared attribute catalog cache.
        """
        self.session = session
        self.repository = ProductRepository(session)
        self.attribute_catalog = attribute_catalog

    async def _load(self, slug: str) -> tuple[Product, VariationResolver, AttributeSnapshot]:
        product = await self.repository.get_by_slug(slug)
        if product is None:
            raise ProductNotFoundError(slug)
        snapshot = await self.attribute_catalog.snapshot()
        variations = self.repository.to_variations(product)
        resolver = VariationResolver(variations, known_attribute_ids=snapshot.by_id.keys())
        return product, resolver, snapshot

    async def get_variation_view(self, slug: str, params: Mapping[str, str]) -> VariationView:
        """Resolve the selection described by slug-keyed parameters.

        Raises:
            ProductNotFoundError: If no active product has this slug.
        """
        product, resolver, snapshot = await self._load(slug)
        selector = VariationSelector(resolver, snapshot, params=params)
        selection = selector.selected_attributes

        options: dict[int, list[str]] = {}
        for variation in sort_variations_for_display(resolver.variations):
            for attr in variation.attributes:
                if attr.attribute_id not in resolver.attribute_ids:
                    continue
                values = options.setdefault(attr.attribute_id, [])
                if attr.value not in values:
                    values.append(attr.value)

        return VariationView(
            product=product,
            selection=selection,
            params=(
                selection_to_params(selection, snapshot)
                if selector.is_default
                else selector.params
            ),
            variation=selector.selected_variation,
            is_default=selector.is_default,
            options=options,
            snapshot=snapshot,
        )

    async def select_variation(
        self,
        slug: str,
        attribute_id: int,
        value: str,
        params: Mapping[str, str],
    ) -> SelectionOutcome:
        """Change one attribute of a URL-backed selection.

        A change that matches no variation leaves the parameters as they
        were and reports ``changed=False``.

        Raises:
            ProductNotFoundError: If no active product has this slug.
        """
        _, resolver, snapshot = await self._load(slug)
        selector = VariationSelector(resolver, snapshot, params=params)
        changed = selector.select(attribute_id, value)

        logger.debug(
            "Variation selection",
            slug=slug,
            attribute_id=attribute_id,
            changed=changed,
        )
        return SelectionOutcome(
            changed=changed,
            params=selector.params,
            variation=selector.selected_variation,
        )

    async def reindex_product(self, slug: str) -> int:
        """Rebuild a product's facet junction rows from its current data.

        Returns:
            Number of junction rows written.

        Raises:
            ProductNotFoundError: If no product has this slug.
        """
        product = await self.repository.get_by_slug(slug, active_only=False)
        if product is None:
            raise ProductNotFoundError(slug)
        snapshot = await self.attribute_catalog.snapshot()
        assignments = self.repository.facet_assignments(
            product, self.repository.to_variations(product)
        )
        return await self.repository.sync_attribute_values(product.id, assignments, snapshot)
