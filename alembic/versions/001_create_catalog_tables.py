"""Create categories, products and users tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _bookkeeping_columns() -> list[sa.Column]:
    return [
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    ]


def upgrade() -> None:
    """Create categories, products and users tables."""
    # Categories table; parent_id is not a foreign key, subtrees are deleted explicitly
    op.create_table(
        'categories',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('parent_id', sa.String(36), nullable=True, index=True),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(1000), nullable=True),
        *_bookkeeping_columns(),
    )

    # Products table
    op.create_table(
        'products',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(500), nullable=False),
        sa.Column('brand', sa.String(255), nullable=True),
        sa.Column('original_price', sa.Float(), nullable=True),
        sa.Column('discounted_price', sa.Float(), nullable=True),
        sa.Column('discount_percentage', sa.Float(), nullable=True),
        sa.Column('price_includes_tax', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('shipping_included', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('shipping_calculated_at_checkout', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('store_purchase_only', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('style_pincode_prompt', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('color', sa.String(100), nullable=True),
        sa.Column('material', sa.String(255), nullable=True),
        sa.Column('warranty_period', sa.String(255), nullable=True),
        sa.Column('delivery', sa.Text(), nullable=True),
        sa.Column('installation', sa.Text(), nullable=True),
        sa.Column('stock_status', sa.String(100), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('product_care_instructions', sa.Text(), nullable=True),
        sa.Column('return_and_cancellation_policy', sa.Text(), nullable=True),
        sa.Column('features', sa.JSON(), nullable=False, server_default='[]'),
        sa.Column('image_urls', sa.JSON(), nullable=False, server_default='[]'),
        sa.Column('category_ids', sa.JSON(), nullable=False, server_default='[]'),
        sa.Column('status', sa.String(20), nullable=True, server_default='active', index=True),
        *_bookkeeping_columns(),
    )

    # Users table
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        *_bookkeeping_columns(),
    )

    op.create_unique_constraint('uq_users_phone', 'users', ['phone'])


def downgrade() -> None:
    """Drop categories, products and users tables."""
    op.drop_table('users')
    op.drop_table('products')
    op.drop_table('categories')
