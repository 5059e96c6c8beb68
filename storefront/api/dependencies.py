"""Shared API dependencies.

The attribute catalog lives on ``app.state`` so it is owned by the
application instance and replaceable in tests.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.catalog.attributes import AttributeCatalog
from storefront.catalog.facets import FacetComputer
from storefront.catalog.search import SearchService
from storefront.catalog.service import CatalogService
from storefront.infrastructure.database import get_session


def get_attribute_catalog(request: Request) -> AttributeCatalog:
    """Get the application's attribute catalog."""
    return request.app.state.attribute_catalog


def get_facet_computer(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> FacetComputer:
    """Get facet computer bound to the request session."""
    return FacetComputer(session)


def get_search_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SearchService:
    """Get search service bound to the request session."""
    return SearchService(session)


def get_catalog_service(
    session: Annotated[AsyncSession, Depends(get_session)],
    attribute_catalog: Annotated[AttributeCatalog, Depends(get_attribute_catalog)],
) -> CatalogService:
    """Get catalog service bound to the request session."""
    return CatalogService(session, attribute_catalog)
