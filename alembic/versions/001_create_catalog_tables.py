"""Create attribute, product, variation and facet junction tables.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create catalog tables."""
    # Attributes
    op.create_table(
        'product_attributes',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('slug', sa.String(255), nullable=False, unique=True),
        sa.Column('value_type', sa.String(20), nullable=False, server_default='free-text'),
        sa.Column('allow_multiple_values', sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    op.create_table(
        'attribute_values',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'attribute_id',
            sa.Integer(),
            sa.ForeignKey('product_attributes.id', ondelete='CASCADE'),
            nullable=False,
            index=True,
        ),
        sa.Column('value', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    # Taxonomy
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False, unique=True),
        sa.Column('parent_slug', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
    )

    for table_name in ('brands', 'collections'):
        op.create_table(
            table_name,
            sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column('name', sa.String(255), nullable=False),
            sa.Column('slug', sa.String(255), nullable=False, unique=True),
        )

    # Products
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(500), nullable=False),
        sa.Column('slug', sa.String(500), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category_slug', sa.String(255), nullable=True, index=True),
        sa.Column('brand_slug', sa.String(255), nullable=True, index=True),
        sa.Column('collection_slug', sa.String(255), nullable=True, index=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true(), index=True),
        sa.Column('has_variations', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('product_attributes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'product_variations',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'product_id',
            sa.Integer(),
            sa.ForeignKey('products.id', ondelete='CASCADE'),
            nullable=False,
            index=True,
        ),
        sa.Column('sku', sa.String(255), nullable=False, unique=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('discount', sa.Numeric(5, 2), nullable=True),
        sa.Column('sort', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'variation_attributes',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'product_variation_id',
            sa.Integer(),
            sa.ForeignKey('product_variations.id', ondelete='CASCADE'),
            nullable=False,
            index=True,
        ),
        sa.Column('attribute_id', sa.String(50), nullable=False),
        sa.Column('value', sa.String(255), nullable=False),
    )

    # Facet junction
    op.create_table(
        'product_attribute_values',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'product_id',
            sa.Integer(),
            sa.ForeignKey('products.id', ondelete='CASCADE'),
            nullable=False,
            index=True,
        ),
        sa.Column(
            'attribute_id',
            sa.Integer(),
            sa.ForeignKey('product_attributes.id', ondelete='CASCADE'),
            nullable=False,
            index=True,
        ),
        sa.Column(
            'value_id',
            sa.Integer(),
            sa.ForeignKey('attribute_values.id', ondelete='CASCADE'),
            nullable=False,
            index=True,
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('product_id', 'attribute_id', 'value_id', name='uq_product_attribute_value'),
    )
    op.create_index('ix_pav_product_attribute', 'product_attribute_values', ['product_id', 'attribute_id'])
    op.create_index('ix_pav_attribute_value', 'product_attribute_values', ['attribute_id', 'value_id'])

    op.create_table(
        'product_store_locations',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'product_id',
            sa.Integer(),
            sa.ForeignKey('products.id', ondelete='CASCADE'),
            nullable=False,
            index=True,
        ),
        sa.Column('store_location_id', sa.Integer(), nullable=False, index=True),
        sa.UniqueConstraint('product_id', 'store_location_id', name='uq_product_store_location'),
    )


def downgrade() -> None:
    """Drop catalog tables."""
    op.drop_table('product_store_locations')
    op.drop_index('ix_pav_attribute_value', table_name='product_attribute_values')
    op.drop_index('ix_pav_product_attribute', table_name='product_attribute_values')
    op.drop_table('product_attribute_values')
    op.drop_table('variation_attributes')
    op.drop_table('product_variations')
    op.drop_table('products')
    op.drop_table('collections')
    op.drop_table('brands')
    op.drop_table('categories')
    op.drop_table('attribute_values')
    op.drop_table('product_attributes')
