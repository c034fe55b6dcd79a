"""create products and sales

Revision ID: c7d1e2f3a4b5
Revises:
Create Date: 2026-10-19 00:00:00.000000

- products: catalog with NUMERIC(10,2) stock and prices
- sales: append-only ledger; product_id is a logical reference to
  products.id (no FK constraint, products are hard-deleted)
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'c7d1e2f3a4b5'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('unit', sa.Text(), nullable=False),
        sa.Column('quantity', sa.Numeric(precision=10, scale=2), nullable=False, server_default='0'),
        sa.Column('cost_price', sa.Numeric(precision=10, scale=2), nullable=False, server_default='0'),
        sa.Column('sale_price', sa.Numeric(precision=10, scale=2), nullable=False, server_default='0'),
        sa.Column('min_stock', sa.Numeric(precision=10, scale=2), nullable=True, server_default='5'),
        sa.Column('is_active', sa.Boolean(), nullable=True, server_default=sa.true()),
        sa.CheckConstraint('quantity >= 0', name='ck_products_quantity_non_negative'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_products_name', 'products', ['name'])

    op.create_table(
        'sales',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('total_price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('sold_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('quantity > 0', name='ck_sales_quantity_positive'),
        sa.CheckConstraint('total_price >= 0', name='ck_sales_total_price_non_negative'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_sales_product_id', 'sales', ['product_id'])
    op.create_index('ix_sales_sold_at', 'sales', ['sold_at'])


def downgrade():
    op.drop_index('ix_sales_sold_at', table_name='sales')
    op.drop_index('ix_sales_product_id', table_name='sales')
    op.drop_table('sales')
    op.drop_index('ix_products_name', table_name='products')
    op.drop_table('products')
