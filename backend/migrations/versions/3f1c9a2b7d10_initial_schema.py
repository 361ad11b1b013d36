"""initial commerce schema and order/auth routines

Revision ID: 3f1c9a2b7d10
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '3f1c9a2b7d10'
down_revision = None
branch_labels = None
depends_on = None


CREATE_ORDER_FN = """
CREATE OR REPLACE FUNCTION create_order(p_user_id integer, p_items json)
RETURNS integer
LANGUAGE plpgsql
AS $$
DECLARE
    v_order_id integer;
    v_total numeric(12, 2);
    v_line record;
    v_stock integer;
BEGIN
    IF NOT EXISTS (SELECT 1 FROM users WHERE id = p_user_id) THEN
        RAISE EXCEPTION 'user % not found', p_user_id USING ERRCODE = 'no_data_found';
    END IF;

    FOR v_line IN
        SELECT x.product_id, SUM(x.quantity) AS quantity
        FROM json_to_recordset(p_items) AS x(product_id integer, quantity integer, unit_price numeric)
        GROUP BY x.product_id
        ORDER BY x.product_id
    LOOP
        SELECT stock INTO v_stock FROM products WHERE id = v_line.product_id FOR UPDATE;
        IF NOT FOUND THEN
            RAISE EXCEPTION 'product % not found', v_line.product_id USING ERRCODE = 'no_data_found';
        END IF;
        IF v_stock < v_line.quantity THEN
            RAISE EXCEPTION 'insufficient stock for product %', v_line.product_id
                USING ERRCODE = 'CS001';
        END IF;
        UPDATE products
        SET stock = stock - v_line.quantity, updated_at = now()
        WHERE id = v_line.product_id;
    END LOOP;

    SELECT COALESCE(ROUND(SUM(x.quantity * x.unit_price), 2), 0) INTO v_total
    FROM json_to_recordset(p_items) AS x(product_id integer, quantity integer, unit_price numeric);

    INSERT INTO orders (user_id, total) VALUES (p_user_id, v_total) RETURNING id INTO v_order_id;

    INSERT INTO order_items (order_id, product_id, quantity, unit_price)
    SELECT v_order_id, x.product_id, x.quantity, x.unit_price
    FROM json_to_recordset(p_items) AS x(product_id integer, quantity integer, unit_price numeric);

    RETURN v_order_id;
END;
$$;
"""

AUTH_USER_FN = """
CREATE OR REPLACE FUNCTION auth_user(p_username varchar, p_password_hash varchar)
RETURNS TABLE (user_id integer, role_name varchar)
LANGUAGE sql
STABLE
AS $$
    SELECT u.id, r.name
    FROM users u
    JOIN roles r ON r.id = u.role_id
    WHERE u.username = p_username AND u.password_hash = p_password_hash
$$;
"""


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade():
    op.create_table(
        'roles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_roles')),
        sa.UniqueConstraint('name', name='uq_roles_name'),
    )
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role_id', sa.Integer(), nullable=False),
        sa.Column('refresh_token', sa.String(length=128), nullable=True),
        sa.Column('refresh_token_expires_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['role_id'], ['roles.id'], name=op.f('fk_users_role_id_roles'), ondelete='RESTRICT'
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
        sa.UniqueConstraint('username', name='uq_users_username'),
        sa.UniqueConstraint('refresh_token', name='uq_users_refresh_token'),
    )
    op.create_index('ix_users_role_id', 'users', ['role_id'])
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('sku', sa.String(length=64), nullable=False),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('price > 0', name=op.f('ck_products_price_positive')),
        sa.CheckConstraint('stock >= 0', name=op.f('ck_products_stock_non_negative')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_products')),
        sa.UniqueConstraint('sku', name='uq_products_sku'),
    )
    op.create_index('ix_products_category', 'products', ['category'])
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('total', sa.Numeric(precision=12, scale=2), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'], name=op.f('fk_orders_user_id_users'), ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_orders')),
    )
    op.create_index('ix_orders_user_id', 'orders', ['user_id'])
    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(precision=12, scale=2), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('quantity > 0', name=op.f('ck_order_items_quantity_positive')),
        sa.CheckConstraint('unit_price > 0', name=op.f('ck_order_items_unit_price_positive')),
        sa.ForeignKeyConstraint(
            ['order_id'], ['orders.id'], name=op.f('fk_order_items_order_id_orders'), ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['product_id'], ['products.id'], name=op.f('fk_order_items_product_id_products'),
            ondelete='RESTRICT',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_order_items')),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    if op.get_bind().dialect.name == 'postgresql':
        op.execute(CREATE_ORDER_FN)
        op.execute(AUTH_USER_FN)


def downgrade():
    if op.get_bind().dialect.name == 'postgresql':
        op.execute('DROP FUNCTION IF EXISTS auth_user(varchar, varchar)')
        op.execute('DROP FUNCTION IF EXISTS create_order(integer, json)')
    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_table('order_items')
    op.drop_index('ix_orders_user_id', table_name='orders')
    op.drop_table('orders')
    op.drop_index('ix_products_category', table_name='products')
    op.drop_table('products')
    op.drop_index('ix_users_role_id', table_name='users')
    op.drop_table('users')
    op.drop_table('roles')
