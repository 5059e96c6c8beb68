"""Full-text product search over SQLite FTS5.

Builds ranked match expressions from raw user text and runs them
against the FTS5 indexes of products, brands, categories and
collections. The default trigram tokenizer cannot match terms shorter
than three characters, so such input is rejected before it reaches the
store.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

import structlog
from sqlalchemy import column, func, literal_column, select, table, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession

from storefront.catalog.models import Brand, Category, Collection, Product
from storefront.domain.exceptions import CatalogQueryError
from storefront.infrastructure.config import settings

logger = structlog.get_logger()

_WHITESPACE = re.compile(r"\s+")
_FTS_SPECIAL = re.compile(r'[*()"]')

SEARCH_TABLES: dict[str, tuple[str, ...]] = {
    "products_fts": ("name", "description"),
    "brands_fts": ("name",),
    "categories_fts": ("name",),
    "collections_fts": ("name",),
}


# ============================================================================
# Query Builder
# ============================================================================


class SearchOperator(str, Enum):
    AND = "AND"
    OR = "OR"


def escape_term(term: str) -> str:
    """Strip characters with special meaning in FTS5 query syntax."""
    return _FTS_SPECIAL.sub("", term)


def build_query(
    raw_text: str | None,
    prefix_mode: bool = False,
    operator: SearchOperator | str = SearchOperator.AND,
    min_length: int | None = None,
) -> str | None:
    """Build an FTS5 match expression from user text.

    Args:
        raw_text: Text as typed by the user.
        prefix_mode: Treat the last term as a prefix (autocomplete).
            Earlier terms still match exactly.
        operator: Boolean operator joining the terms.
        min_length: Minimum query and term length; defaults to the
            configured value.

    Returns:
        Match expression such as ``"oak" AND "floo"*``, or None when the
        text is too short to search.

    Example:
        >>> build_query("oak  floo", prefix_mode=True)
        '"oak" AND "floo"*'
    """
    minimum = settings.search_min_query_length if min_length is None else min_length
    joiner = SearchOperator(operator).value

    normalized = _WHITESPACE.sub(" ", raw_text or "").strip()
    if len(normalized) < minimum:
        return None

    terms = [escape_term(token) for token in normalized.split(" ")]
    terms = [term for term in terms if len(term) >= minimum]
    if not terms:
        return None

    quoted = [f'"{term}"' for term in terms]
    if prefix_mode:
        quoted[-1] = f"{quoted[-1]}*"
    return f" {joiner} ".join(quoted)


def build_autocomplete_query(raw_text: str | None) -> str | None:
    """Build a prefix-mode expression for search-as-you-type."""
    return build_query(raw_text, prefix_mode=True)


# ============================================================================
# Index Management
# ============================================================================


def search_index_ddl(tokenizer: str | None = None) -> list[str]:
    """DDL statements creating the FTS5 virtual tables."""
    tokenize = tokenizer or settings.search_tokenizer
    return [
        f"CREATE VIRTUAL TABLE IF NOT EXISTS {name} "
        f"USING fts5({', '.join(columns)}, tokenize='{tokenize}')"
        for name, columns in SEARCH_TABLES.items()
    ]


async def create_search_index(connection: AsyncConnection, tokenizer: str | None = None) -> None:
    """Create the FTS5 virtual tables if they do not exist.

    Args:
        connection: Open async connection.
        tokenizer: FTS5 tokenizer; defaults to the configured one.
    """
    for statement in search_index_ddl(tokenizer):
        await connection.execute(text(statement))


async def rebuild_search_index(session: AsyncSession) -> None:
    """Repopulate every FTS5 table from its source table.

    Row ids mirror the source entity ids.
    """
    sources = {
        "products_fts": "SELECT id, name, coalesce(description, '') FROM products",
        "brands_fts": "SELECT id, name FROM brands",
        "categories_fts": "SELECT id, name FROM categories",
        "collections_fts": "SELECT id, name FROM collections",
    }
    for name, columns in SEARCH_TABLES.items():
        await session.execute(text(f"DELETE FROM {name}"))
        await session.execute(
            text(f"INSERT INTO {name}(rowid, {', '.join(columns)}) {sources[name]}")
        )
    logger.info("Search index rebuilt", tables=list(SEARCH_TABLES))


# ============================================================================
# Search Service
# ============================================================================


class SearchSort(str, Enum):
    """Result orderings offered on the storefront."""

    RELEVANT = "relevant"
    NAME = "name"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    NEWEST = "newest"
    OLDEST = "oldest"


class SuggestionType(str, Enum):
    CATEGORY = "category"
    BRAND = "brand"
    COLLECTION = "collection"
    PRODUCT = "product"


@dataclass(frozen=True)
class Suggestion:
    """Autocomplete entry; ``slug`` identifies the target entity."""

    type: SuggestionType
    text: str
    slug: str


@dataclass
class SearchPage:
    """One page of ranked search results."""

    items: list[Product] = field(default_factory=list)
    total: int = 0
    query: str | None = None


def _fts(name: str):
    return table(name, column("rowid"), column("rank"))


def _matches(name: str, query: str):
    return literal_column(name).op("MATCH")(query)


class SearchService:
    """Runs ranked full-text searches.

    Example usage:
        service = SearchService(session)
        page = await service.search_products("oak floor", sort=SearchSort.PRICE_ASC)
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize service with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def search_products(
        self,
        raw_text: str | None,
        sort: SearchSort = SearchSort.RELEVANT,
        limit: int | None = None,
        offset: int = 0,
        prefix_mode: bool = False,
    ) -> SearchPage:
        """Search active products.

        Ordering is the explicit sort first, then relevance rank, then
        name.

        Args:
            raw_text: User search text.
            sort: Explicit ordering.
            limit: Page size; defaults to the configured value.
            offset: Number of results to skip.
            prefix_mode: Treat the last term as a prefix.

        Returns:
            SearchPage; empty when the text is too short to search.

        Raises:
            CatalogQueryError: If the store fails.
        """
        query = build_query(raw_text, prefix_mode=prefix_mode)
        if query is None:
            return SearchPage()

        fts = _fts("products_fts")
        conditions = [_matches("products_fts", query), Product.is_active.is_(True)]

        order_by = list(self._sort_columns(sort))
        order_by.extend([fts.c.rank, Product.name, Product.id])

        stmt = (
            select(Product)
            .join(fts, fts.c.rowid == Product.id)
            .where(*conditions)
            .order_by(*order_by)
            .limit(limit or settings.search_default_limit)
            .offset(offset)
        )
        count_stmt = (
            select(func.count())
            .select_from(Product)
            .join(fts, fts.c.rowid == Product.id)
            .where(*conditions)
        )

        try:
            total = (await self.session.execute(count_stmt)).scalar_one()
            items = list((await self.session.execute(stmt)).scalars().all())
        except SQLAlchemyError as e:
            logger.error("Product search failed", query=query, error=str(e))
            raise CatalogQueryError("search_products", str(e)) from e

        logger.debug("Product search", query=query, sort=sort.value, total=total)
        return SearchPage(items=items, total=total, query=query)

    @staticmethod
    def _sort_columns(sort: SearchSort) -> Sequence:
        if sort == SearchSort.NAME:
            return (Product.name.asc(),)
        if sort == SearchSort.PRICE_ASC:
            return (Product.price.asc(),)
        if sort == SearchSort.PRICE_DESC:
            return (Product.price.desc(),)
        if sort == SearchSort.NEWEST:
            return (Product.created_at.desc(),)
        if sort == SearchSort.OLDEST:
            return (Product.created_at.asc(),)
        return ()

    async def suggest(self, raw_text: str | None, limit: int | None = None) -> list[Suggestion]:
        """Autocomplete suggestions across catalog entities.

        Categories come first, then brands, collections and products.
        Entries with the same text (case-insensitive) are listed once.

        Raises:
            CatalogQueryError: If the store fails.
        """
        query = build_autocomplete_query(raw_text)
        if query is None:
            return []

        size = limit or settings.suggestions_limit
        secondary = max(size // 2, 1)
        sources = [
            (SuggestionType.CATEGORY, Category, "categories_fts", secondary),
            (SuggestionType.BRAND, Brand, "brands_fts", secondary),
            (SuggestionType.COLLECTION, Collection, "collections_fts", secondary),
            (SuggestionType.PRODUCT, Product, "products_fts", size),
        ]

        suggestions: list[Suggestion] = []
        seen: set[str] = set()
        try:
            for suggestion_type, model, fts_name, source_limit in sources:
                fts = _fts(fts_name)
                stmt = (
                    select(model.name, model.slug)
                    .join(fts, fts.c.rowid == model.id)
                    .where(_matches(fts_name, query))
                    .order_by(fts.c.rank, model.name)
                    .limit(source_limit)
                )
                if hasattr(model, "is_active"):
                    stmt = stmt.where(model.is_active.is_(True))
                for name, slug in (await self.session.execute(stmt)).all():
                    key = name.casefold()
                    if key in seen:
                        continue
                    seen.add(key)
                    suggestions.append(Suggestion(type=suggestion_type, text=name, slug=slug))
        except SQLAlchemyError as e:
            logger.error("Search suggestions failed", query=query, error=str(e))
            raise CatalogQueryError("suggest", str(e)) from e

        return suggestions[:size]

    async def popular_terms(self, limit: int = 5) -> list[Suggestion]:
        """Active categories in display order, shown before the user types.

        Raises:
            CatalogQueryError: If the store fails.
        """
        stmt = (
            select(Category.name, Category.slug)
            .where(Category.is_active.is_(True))
            .order_by(Category.order, Category.name)
            .limit(limit)
        )
        try:
            rows = (await self.session.execute(stmt)).all()
        except SQLAlchemyError as e:
            logger.error("Popular terms lookup failed", error=str(e))
            raise CatalogQueryError("popular_terms", str(e)) from e
        return [Suggestion(type=SuggestionType.CATEGORY, text=name, slug=slug) for name, slug in rows]
