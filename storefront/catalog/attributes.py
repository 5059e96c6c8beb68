"""Attribute catalog with a time-bounded cache.

Attribute definitions change rarely but are read on every filter,
variation and SKU operation. The catalog keeps an immutable snapshot
of attributes and their active values and refreshes it when the TTL
expires or after an explicit invalidation.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any

import structlog

from storefront.catalog.parsing import parse_attribute_id, split_multi_value
from storefront.domain.exceptions import AttributeCatalogUnavailableError
from storefront.domain.value_objects import Attribute, AttributeAssignment, AttributeValue
from storefront.infrastructure.config import settings

logger = structlog.get_logger()

AttributeLoader = Callable[[], Awaitable[tuple[Sequence[Attribute], Sequence[AttributeValue]]]]


# ============================================================================
# Snapshot
# ============================================================================


@dataclass(frozen=True)
class AttributeSnapshot:
    """Immutable view of the attribute catalog at one point in time.

    Attributes:
        attributes: All attributes, ordered by name.
        by_id: Attribute id to attribute.
        by_slug: Attribute slug to attribute.
        values_by_attribute: Attribute id to active values, ordered by
            sort order then value.
        loaded_at: When the snapshot was loaded.
    """

    attributes: tuple[Attribute, ...] = ()
    by_id: Mapping[int, Attribute] = field(default_factory=lambda: MappingProxyType({}))
    by_slug: Mapping[str, Attribute] = field(default_factory=lambda: MappingProxyType({}))
    values_by_attribute: Mapping[int, tuple[AttributeValue, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def build(
        cls,
        attributes: Iterable[Attribute],
        values: Iterable[AttributeValue],
        loaded_at: datetime | None = None,
    ) -> "AttributeSnapshot":
        """Build a snapshot from loaded attributes and values.

        Inactive values and values of unknown attributes are left out.
        """
        ordered = tuple(sorted(attributes, key=lambda a: (a.name.lower(), a.id)))
        by_id = {attribute.id: attribute for attribute in ordered}

        grouped: dict[int, list[AttributeValue]] = {}
        for value in values:
            if value.is_active and value.attribute_id in by_id:
                grouped.setdefault(value.attribute_id, []).append(value)

        return cls(
            attributes=ordered,
            by_id=MappingProxyType(by_id),
            by_slug=MappingProxyType({attribute.slug: attribute for attribute in ordered}),
            values_by_attribute=MappingProxyType(
                {
                    attribute_id: tuple(sorted(items, key=lambda v: (v.sort_order, v.value)))
                    for attribute_id, items in grouped.items()
                }
            ),
            loaded_at=loaded_at or datetime.now(timezone.utc),
        )

    def id_to_slug(self, attribute_id: Any) -> str | None:
        """Translate an attribute id (int or numeric string) to its slug."""
        parsed = parse_attribute_id(attribute_id)
        attribute = self.by_id.get(parsed) if parsed is not None else None
        return attribute.slug if attribute else None

    def slug_to_id(self, slug: str) -> int | None:
        """Translate an attribute slug to its id."""
        attribute = self.by_slug.get(slug)
        return attribute.id if attribute else None

    def ids_to_slugs(self, attribute_ids: Iterable[Any]) -> dict[int, str]:
        """Translate several ids at once; unknown ids are omitted."""
        result: dict[int, str] = {}
        for raw_id in attribute_ids:
            parsed = parse_attribute_id(raw_id)
            if parsed is not None and parsed in self.by_id:
                result[parsed] = self.by_id[parsed].slug
        return result

    def values_for(self, attribute_id: int) -> tuple[AttributeValue, ...]:
        """Active values of an attribute."""
        return self.values_by_attribute.get(attribute_id, ())

    def value_id(self, attribute_id: int, value: str) -> int | None:
        """Look up the id of an active vocabulary value.

        Args:
            attribute_id: Attribute the value belongs to.
            value: Value text; surrounding whitespace is ignored.

        Returns:
            Value id, or None when the value is not in the vocabulary.
        """
        needle = value.strip()
        for candidate in self.values_for(attribute_id):
            if candidate.value == needle:
                return candidate.id
        return None

    def to_slug_format(self, assignments: Iterable[AttributeAssignment]) -> dict[str, list[str]]:
        """Render product attributes keyed by attribute slug.

        Comma-separated values are split into lists and blank entries
        skipped. Attributes missing from the catalog keep their id as key.

        Example:
            {"design": ["Wood", "Stone"], "thickness": ["8 mm"]}
        """
        result: dict[str, list[str]] = {}
        for assignment in assignments:
            key = self.id_to_slug(assignment.attribute_id) or str(assignment.attribute_id)
            entries = split_multi_value(assignment.value)
            if entries:
                result.setdefault(key, []).extend(entries)
        return result


# ============================================================================
# Catalog
# ============================================================================


class AttributeCatalog:
    """Cache of the attribute catalog with TTL-based refresh.

    Readers holding a fresh snapshot never wait. When the snapshot is
    stale a single refresh runs; concurrent readers get the stale
    snapshot meanwhile, or wait for the refresh if none was loaded yet.
    A failed refresh keeps the previous snapshot.

    Example usage:
        catalog = AttributeCatalog(loader=load_attributes)
        snapshot = await catalog.snapshot()
        slug = snapshot.id_to_slug(3)
    """

    def __init__(
        self,
        loader: AttributeLoader,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the catalog.

        Args:
            loader: Async callable returning (attributes, values).
            ttl_seconds: Snapshot lifetime; defaults to the configured TTL.
            clock: Monotonic clock, injectable for tests.
        """
        self._loader = loader
        self._ttl = settings.attribute_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._snapshot: AttributeSnapshot | None = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()

    @property
    def is_fresh(self) -> bool:
        """Whether a snapshot is loaded and within its TTL."""
        return self._snapshot is not None and self._clock() < self._expires_at

    async def snapshot(self) -> AttributeSnapshot:
        """Return the current snapshot, refreshing it when stale.

        Raises:
            AttributeCatalogUnavailableError: If nothing was ever loaded
                and the loader fails.
        """
        if self.is_fresh:
            return self._snapshot  # type: ignore[return-value]

        if self._snapshot is not None and self._lock.locked():
            return self._snapshot

        async with self._lock:
            if self.is_fresh:
                return self._snapshot  # type: ignore[return-value]
            return await self._refresh()

    def invalidate(self) -> None:
        """Mark the snapshot stale; the next read refreshes it."""
        self._expires_at = 0.0
        logger.info("Attribute catalog invalidated")

    async def _refresh(self) -> AttributeSnapshot:
        try:
            attributes, values = await self._loader()
        except Exception as e:
            logger.warning(
                "Attribute catalog refresh failed",
                error=str(e),
                has_previous_snapshot=self._snapshot is not None,
            )
            if self._snapshot is None:
                raise AttributeCatalogUnavailableError(str(e)) from e
            return self._snapshot

        snapshot = AttributeSnapshot.build(attributes, values)
        self._snapshot = snapshot
        self._expires_at = self._clock() + self._ttl

        logger.info(
            "Attribute catalog refreshed",
            attribute_count=len(snapshot.attributes),
            ttl_seconds=self._ttl,
        )
        return snapshot
