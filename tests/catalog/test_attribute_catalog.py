"""Tests for the attribute catalog cache."""

import asyncio

import pytest

from storefront.catalog.attributes import AttributeCatalog, AttributeSnapshot
from storefront.domain.exceptions import AttributeCatalogUnavailableError
from storefront.domain.value_objects import (
    Attribute,
    AttributeAssignment,
    AttributeValue,
    ValueType,
)

ATTRIBUTES = [
    Attribute(id=2, slug="size", name="Size", value_type=ValueType.STANDARDIZED),
    Attribute(id=1, slug="color", name="Color", value_type=ValueType.STANDARDIZED),
]
VALUES = [
    AttributeValue(id=11, attribute_id=1, value="red", sort_order=1),
    AttributeValue(id=10, attribute_id=1, value="blue", sort_order=1),
    AttributeValue(id=12, attribute_id=1, value="green", sort_order=0, is_active=False),
    AttributeValue(id=20, attribute_id=2, value="S"),
    AttributeValue(id=99, attribute_id=42, value="orphan"),
]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class CountingLoader:
    """Loader that counts calls and can be made to fail."""

    def __init__(self) -> None:
        self.calls = 0
        self.fail = False

    async def __call__(self):
        self.calls += 1
        await asyncio.sleep(0)
        if self.fail:
            raise RuntimeError("database down")
        return ATTRIBUTES, VALUES


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def loader() -> CountingLoader:
    return CountingLoader()


@pytest.fixture
def catalog(loader: CountingLoader, clock: FakeClock) -> AttributeCatalog:
    return AttributeCatalog(loader=loader, ttl_seconds=60, clock=clock)


class TestAttributeCatalogCaching:
    """Tests for TTL-based refresh."""

    @pytest.mark.asyncio
    async def test_fresh_snapshot_is_reused(self, catalog, loader) -> None:
        """Reads within the TTL should not call the loader again."""
        first = await catalog.snapshot()
        second = await catalog.snapshot()
        assert first is second
        assert loader.calls == 1

    @pytest.mark.asyncio
    async def test_expired_snapshot_is_refreshed(self, catalog, loader, clock) -> None:
        """A read after the TTL should reload."""
        first = await catalog.snapshot()
        clock.now = 61
        second = await catalog.snapshot()
        assert second is not first
        assert loader.calls == 2

    @pytest.mark.asyncio
    async def test_invalidate_forces_refresh(self, catalog, loader) -> None:
        """Invalidation makes the next read reload."""
        await catalog.snapshot()
        catalog.invalidate()
        assert not catalog.is_fresh
        await catalog.snapshot()
        assert loader.calls == 2

    @pytest.mark.asyncio
    async def test_concurrent_first_reads_load_once(self, catalog, loader) -> None:
        """Concurrent readers without a snapshot share one refresh."""
        snapshots = await asyncio.gather(*(catalog.snapshot() for _ in range(5)))
        assert loader.calls == 1
        assert all(snapshot is snapshots[0] for snapshot in snapshots)

    @pytest.mark.asyncio
    async def test_stale_snapshot_served_during_refresh(self, clock) -> None:
        """While a refresh is in flight, readers get the stale snapshot."""
        release = asyncio.Event()
        calls = 0

        async def slow_loader():
            nonlocal calls
            calls += 1
            if calls > 1:
                await release.wait()
            return ATTRIBUTES, VALUES

        catalog = AttributeCatalog(loader=slow_loader, ttl_seconds=60, clock=clock)
        stale = await catalog.snapshot()
        clock.now = 120

        refresh = asyncio.create_task(catalog.snapshot())
        await asyncio.sleep(0)
        assert await catalog.snapshot() is stale

        release.set()
        fresh = await refresh
        assert fresh is not stale
        assert calls == 2


class TestAttributeCatalogFailures:
    """Tests for refresh failures."""

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_snapshot(self, catalog, loader, clock) -> None:
        """A failed refresh should return the previous snapshot."""
        first = await catalog.snapshot()
        loader.fail = True
        clock.now = 61
        assert await catalog.snapshot() is first
        assert loader.calls == 2

    @pytest.mark.asyncio
    async def test_failure_without_snapshot_raises(self, catalog, loader) -> None:
        """With nothing loaded, a failure is surfaced."""
        loader.fail = True
        with pytest.raises(AttributeCatalogUnavailableError) as exc_info:
            await catalog.snapshot()
        assert "database down" in exc_info.value.message


class TestAttributeSnapshot:
    """Tests for snapshot lookups."""

    @pytest.fixture
    def snapshot(self) -> AttributeSnapshot:
        return AttributeSnapshot.build(ATTRIBUTES, VALUES)

    def test_attributes_ordered_by_name(self, snapshot) -> None:
        assert [a.slug for a in snapshot.attributes] == ["color", "size"]

    def test_slug_translation(self, snapshot) -> None:
        """Ids and slugs translate both ways; unknowns yield None."""
        assert snapshot.id_to_slug(1) == "color"
        assert snapshot.id_to_slug("2") == "size"
        assert snapshot.id_to_slug(7) is None
        assert snapshot.slug_to_id("size") == 2
        assert snapshot.slug_to_id("weight") is None

    def test_ids_to_slugs_omits_unknown(self, snapshot) -> None:
        assert snapshot.ids_to_slugs([1, "2", "x", 99]) == {1: "color", 2: "size"}

    def test_values_are_active_and_ordered(self, snapshot) -> None:
        """Inactive and orphan values are excluded; order is sort_order then value."""
        assert [v.value for v in snapshot.values_for(1)] == ["blue", "red"]
        assert snapshot.values_for(42) == ()

    def test_value_id_lookup(self, snapshot) -> None:
        assert snapshot.value_id(1, " red ") == 11
        assert snapshot.value_id(1, "green") is None

    def test_to_slug_format_splits_values(self, snapshot) -> None:
        """Multi-value entries split on commas; unknown ids keep their id."""
        result = snapshot.to_slug_format(
            [
                AttributeAssignment(attribute_id=1, value="red, blue"),
                AttributeAssignment(attribute_id=5, value="Wood"),
                AttributeAssignment(attribute_id=2, value=" , "),
            ]
        )
        assert result == {"color": ["red", "blue"], "5": ["Wood"]}
