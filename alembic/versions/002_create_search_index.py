"""Create FTS5 search index tables.

Revision ID: 002
Revises: 001
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op

from storefront.catalog.search import SEARCH_TABLES, search_index_ddl

# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create FTS5 virtual tables for products, brands, categories, collections."""
    for statement in search_index_ddl():
        op.execute(statement)


def downgrade() -> None:
    """Drop FTS5 virtual tables."""
    for table_name in SEARCH_TABLES:
        op.execute(f'DROP TABLE IF EXISTS {table_name}')
