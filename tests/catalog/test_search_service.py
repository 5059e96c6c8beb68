"""Tests for ranked product search and suggestions over FTS5."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError

from storefront.catalog.models import Brand, Category, Collection, Product
from storefront.catalog.search import (
    SearchService,
    SearchSort,
    SuggestionType,
    create_search_index,
    rebuild_search_index,
)
from storefront.domain.exceptions import CatalogQueryError


@pytest_asyncio.fixture
async def search_session(engine, session):
    """Session with a populated FTS5 index (unicode61 tokenizer)."""
    try:
        async with engine.begin() as connection:
            await create_search_index(connection, tokenizer="unicode61")
    except OperationalError:
        pytest.skip("SQLite build without FTS5")

    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    session.add_all(
        [
            Product(id=1, name="Oak Flooring Classic", slug="oak-classic", price=Decimal("30"), created_at=base),
            Product(
                id=2,
                name="Oak Floorboard Rustic",
                slug="oak-rustic",
                price=Decimal("20"),
                created_at=base + timedelta(days=1),
            ),
            Product(
                id=3,
                name="Pine Flooring",
                slug="pine",
                description="A lighter alternative to oak",
                price=Decimal("10"),
                created_at=base + timedelta(days=2),
            ),
            Product(id=4, name="Walnut Panel", slug="walnut", price=Decimal("50"), created_at=base),
            Product(
                id=5,
                name="Oak Flooring Old",
                slug="oak-old",
                price=Decimal("5"),
                is_active=False,
                created_at=base,
            ),
            Category(id=1, name="Flooring", slug="flooring", order=1),
            Category(id=2, name="Walls", slug="walls", order=0),
            Category(id=3, name="Floor Archive", slug="archive", order=2, is_active=False),
            Brand(id=1, name="Oakwood", slug="oakwood"),
            Collection(id=1, name="Pine Flooring", slug="pine-line"),
        ]
    )
    await session.flush()
    await rebuild_search_index(session)
    return session


class TestSearchProducts:
    """Tests for SearchService.search_products."""

    @pytest.mark.asyncio
    async def test_prefix_search_matches_active_products(self, search_session) -> None:
        """Terms may match across columns; inactive products never appear."""
        page = await SearchService(search_session).search_products("oak floo", prefix_mode=True)
        assert page.total == 3
        assert {product.slug for product in page.items} == {"oak-classic", "oak-rustic", "pine"}
        assert page.query == '"oak" AND "floo"*'

    @pytest.mark.asyncio
    async def test_exact_mode_does_not_prefix_match(self, search_session) -> None:
        page = await SearchService(search_session).search_products("oak floo")
        assert page.total == 0
        assert page.items == []

    @pytest.mark.asyncio
    async def test_explicit_sort_takes_precedence(self, search_session) -> None:
        page = await SearchService(search_session).search_products(
            "oak", sort=SearchSort.PRICE_ASC
        )
        assert [product.slug for product in page.items] == ["pine", "oak-rustic", "oak-classic"]

    @pytest.mark.asyncio
    async def test_name_and_date_sorts(self, search_session) -> None:
        service = SearchService(search_session)
        by_name = await service.search_products("oak", sort=SearchSort.NAME)
        assert [p.slug for p in by_name.items] == ["oak-rustic", "oak-classic", "pine"]
        newest = await service.search_products("oak", sort=SearchSort.NEWEST)
        assert [p.slug for p in newest.items] == ["pine", "oak-rustic", "oak-classic"]

    @pytest.mark.asyncio
    async def test_pagination(self, search_session) -> None:
        page = await SearchService(search_session).search_products(
            "oak", sort=SearchSort.PRICE_DESC, limit=1, offset=1
        )
        assert page.total == 3
        assert [p.slug for p in page.items] == ["oak-rustic"]

    @pytest.mark.asyncio
    async def test_short_text_returns_empty_page(self) -> None:
        """Gated text never touches the store."""
        session = MagicMock()
        session.execute = AsyncMock()
        page = await SearchService(session).search_products("oa")
        assert page.items == []
        assert page.query is None
        session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_failure_raises(self) -> None:
        session = MagicMock()
        session.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("no such table")))
        with pytest.raises(CatalogQueryError):
            await SearchService(session).search_products("oak floor")


class TestSuggestions:
    """Tests for SearchService.suggest and popular_terms."""

    @pytest.mark.asyncio
    async def test_suggestions_ordered_and_deduplicated(self, search_session) -> None:
        """Categories lead, then collections, then products; names appear once."""
        suggestions = await SearchService(search_session).suggest("flo", limit=10)
        types = [s.type for s in suggestions]
        assert types[0] == SuggestionType.CATEGORY
        assert suggestions[0].text == "Flooring"
        assert types[1] == SuggestionType.COLLECTION
        assert suggestions[1].text == "Pine Flooring"
        assert all(t == SuggestionType.PRODUCT for t in types[2:])
        texts = [s.text.casefold() for s in suggestions]
        assert len(texts) == len(set(texts))
        assert "oak flooring old" not in texts
        assert "floor archive" not in texts

    @pytest.mark.asyncio
    async def test_suggestions_truncated_to_limit(self, search_session) -> None:
        suggestions = await SearchService(search_session).suggest("flo", limit=2)
        assert [s.text for s in suggestions] == ["Flooring", "Pine Flooring"]

    @pytest.mark.asyncio
    async def test_short_text_has_no_suggestions(self, search_session) -> None:
        assert await SearchService(search_session).suggest("f") == []

    @pytest.mark.asyncio
    async def test_popular_terms_are_active_categories_in_order(self, search_session) -> None:
        terms = await SearchService(search_session).popular_terms(limit=5)
        assert [t.text for t in terms] == ["Walls", "Flooring"]
        assert terms[0].slug == "walls"


@pytest_asyncio.fixture
async def trigram_session(engine, session):
    """Session whose FTS5 index uses the configured trigram tokenizer."""
    try:
        async with engine.begin() as connection:
            await create_search_index(connection)
    except OperationalError:
        pytest.skip("SQLite build without the FTS5 trigram tokenizer")

    session.add_all(
        [
            Product(id=1, name="Oak Flooring Classic", slug="oak-classic", price=Decimal("30")),
            Product(id=2, name="Walnut Panel", slug="walnut", price=Decimal("50")),
        ]
    )
    await session.flush()
    await rebuild_search_index(session)
    return session


class TestTrigramIndex:
    """Search against the default tokenizer."""

    @pytest.mark.asyncio
    async def test_prefix_search(self, trigram_session) -> None:
        page = await SearchService(trigram_session).search_products("oak floo", prefix_mode=True)
        assert page.total == 1
        assert [p.slug for p in page.items] == ["oak-classic"]

    @pytest.mark.asyncio
    async def test_matches_inside_words(self, trigram_session) -> None:
        """Trigrams match any substring of at least three characters."""
        page = await SearchService(trigram_session).search_products("ooring")
        assert [p.slug for p in page.items] == ["oak-classic"]
