"""Shared fixtures for API tests.

Services are replaced through FastAPI dependency overrides so the
endpoints are exercised without a database.
"""

from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from storefront.api.dependencies import (
    get_attribute_catalog,
    get_catalog_service,
    get_facet_computer,
    get_search_service,
)
from storefront.catalog.attributes import AttributeCatalog
from storefront.catalog.facets import FacetComputer
from storefront.catalog.search import SearchPage, SearchService
from storefront.catalog.service import CatalogService
from storefront.domain.value_objects import Attribute, ValueType
from storefront.main import app

ATTRIBUTES = [
    Attribute(id=1, slug="color", name="Color", value_type=ValueType.STANDARDIZED),
    Attribute(id=2, slug="size", name="Size", value_type=ValueType.STANDARDIZED),
]


@pytest.fixture
def attribute_catalog() -> AttributeCatalog:
    """Attribute catalog backed by a static loader."""

    async def loader():
        return ATTRIBUTES, []

    return AttributeCatalog(loader=loader)


@pytest.fixture
def facet_computer() -> MagicMock:
    computer = MagicMock(spec=FacetComputer)
    computer.compute_facets = AsyncMock(return_value=[])
    return computer


@pytest.fixture
def search_service() -> MagicMock:
    service = MagicMock(spec=SearchService)
    service.search_products = AsyncMock(return_value=SearchPage())
    service.suggest = AsyncMock(return_value=[])
    service.popular_terms = AsyncMock(return_value=[])
    return service


@pytest.fixture
def catalog_service() -> MagicMock:
    service = MagicMock(spec=CatalogService)
    service.get_variation_view = AsyncMock()
    service.select_variation = AsyncMock()
    return service


@pytest.fixture
def client(
    attribute_catalog: AttributeCatalog,
    facet_computer: MagicMock,
    search_service: MagicMock,
    catalog_service: MagicMock,
) -> Generator[TestClient, None, None]:
    """Create test client with service dependencies overridden."""
    app.dependency_overrides[get_attribute_catalog] = lambda: attribute_catalog
    app.dependency_overrides[get_facet_computer] = lambda: facet_computer
    app.dependency_overrides[get_search_service] = lambda: search_service
    app.dependency_overrides[get_catalog_service] = lambda: catalog_service
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
