"""Shared fixtures: in-memory SQLite database with a small seeded catalog.

Seeded catalog (category "flooring" unless noted):

    attributes: 1 Color (standardized), 2 Size (standardized),
                3 Material (free-text), 4 Finish (both, multi-value)
    values:     1 red, 2 blue, 3 green (inactive), 4 S, 5 M,
                6 matte, 7 glossy, 8 oak
    products:   1 red/S (location 10), 2 red/M, 3 blue/S (location 10),
                4 blue/M (inactive), 5 red/S in category "walls"
"""

from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from storefront.catalog.models import (
    AttributeValueRecord,
    Product,
    ProductAttribute,
    ProductAttributeValue,
    ProductStoreLocation,
)
from storefront.infrastructure.database import Base

COLOR, SIZE, MATERIAL, FINISH = 1, 2, 3, 4
RED, BLUE, GREEN, SMALL, MEDIUM, MATTE, GLOSSY, OAK = 1, 2, 3, 4, 5, 6, 7, 8


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create in-memory database with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create database session."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded_session(session: AsyncSession) -> AsyncSession:
    """Session over the seeded facet catalog."""
    session.add_all(
        [
            ProductAttribute(id=COLOR, name="Color", slug="color", value_type="standardized"),
            ProductAttribute(id=SIZE, name="Size", slug="size", value_type="standardized"),
            ProductAttribute(id=MATERIAL, name="Material", slug="material", value_type="free-text"),
            ProductAttribute(
                id=FINISH,
                name="Finish",
                slug="finish",
                value_type="both",
                allow_multiple_values=True,
            ),
        ]
    )
    session.add_all(
        [
            AttributeValueRecord(id=RED, attribute_id=COLOR, value="red", slug="red", sort_order=0),
            AttributeValueRecord(id=BLUE, attribute_id=COLOR, value="blue", slug="blue", sort_order=1),
            AttributeValueRecord(
                id=GREEN, attribute_id=COLOR, value="green", slug="green", sort_order=2, is_active=False
            ),
            AttributeValueRecord(id=SMALL, attribute_id=SIZE, value="S", slug="s", sort_order=0),
            AttributeValueRecord(id=MEDIUM, attribute_id=SIZE, value="M", slug="m", sort_order=1),
            AttributeValueRecord(id=MATTE, attribute_id=FINISH, value="matte", sort_order=0),
            AttributeValueRecord(id=GLOSSY, attribute_id=FINISH, value="glossy", sort_order=1),
            AttributeValueRecord(id=OAK, attribute_id=MATERIAL, value="oak", sort_order=0),
        ]
    )
    await session.flush()

    products = [
        (1, "flooring", True, RED, SMALL),
        (2, "flooring", True, RED, MEDIUM),
        (3, "flooring", True, BLUE, SMALL),
        (4, "flooring", False, BLUE, MEDIUM),
        (5, "walls", True, RED, SMALL),
    ]
    for product_id, category, active, color, size in products:
        session.add(
            Product(
                id=product_id,
                name=f"Product {product_id}",
                slug=f"product-{product_id}",
                category_slug=category,
                is_active=active,
                price=Decimal("10.00"),
            )
        )
    await session.flush()

    for product_id, _, _, color, size in products:
        session.add_all(
            [
                ProductAttributeValue(product_id=product_id, attribute_id=COLOR, value_id=color),
                ProductAttributeValue(product_id=product_id, attribute_id=SIZE, value_id=size),
            ]
        )
    session.add_all(
        [
            # Inactive value and free-text attribute never surface as facets
            ProductAttributeValue(product_id=3, attribute_id=COLOR, value_id=GREEN),
            ProductAttributeValue(product_id=1, attribute_id=MATERIAL, value_id=OAK),
            ProductStoreLocation(product_id=1, store_location_id=10),
            ProductStoreLocation(product_id=3, store_location_id=10),
        ]
    )
    await session.flush()
    return session
