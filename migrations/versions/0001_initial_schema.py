"""initial marketplace, food, services and delivery schema

Revision ID: 0001_initial_schema
Revises: None
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

# Python enums are stored by member name
ENUMS = {
    'approval_status': ('PENDING', 'APPROVED', 'REJECTED'),
    'order_status': ('PENDING', 'CONFIRMED', 'OUT_FOR_DELIVERY', 'DELIVERED', 'CANCELLED'),
    'payment_status': ('PENDING', 'PAID', 'FAILED', 'REFUNDED', 'CANCELLED'),
    'payment_method': ('COD', 'CARD', 'UPI'),
    'assignment_status': ('PENDING', 'ACCEPTED', 'PICKED_UP', 'ON_THE_WAY', 'DELIVERED'),
    'food_order_status': ('PENDING', 'PREPARING', 'READY', 'OUT_FOR_DELIVERY', 'DELIVERED', 'CANCELLED'),
    'booking_status': ('PENDING', 'ACCEPTED', 'COMPLETED', 'REJECTED', 'CANCELLED'),
    'user_roles': ('customer', 'delivery', 'admin'),
}


def enum(name):
    # Types are created once up front; tables must not re-create shared ones
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def approval_columns(table):
    return [
        sa.Column('approval_status', enum('approval_status'), nullable=False),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('approved_by', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['approved_by'], ['users.id'], name=f'fk_{table}_approved_by_users'),
    ]


def upgrade():
    bind = op.get_bind()
    for name, values in ENUMS.items():
        sa.Enum(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('full_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('password_hash', sa.String(length=128), nullable=False),
        sa.Column('role', enum('user_roles'), nullable=False),
        sa.Column('profile_image_url', sa.String(length=500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sa.UniqueConstraint('email', name='uq_users_email'),
        sa.UniqueConstraint('phone', name='uq_users_phone'),
    )

    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('slug', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        *timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_categories'),
        sa.UniqueConstraint('slug', name='uq_categories_slug'),
    )

    op.create_table(
        'sellers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('business_name', sa.String(length=150), nullable=False),
        sa.Column('business_type', sa.String(length=80), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('logo_url', sa.String(length=500), nullable=True),
        sa.Column('business_address', sa.Text(), nullable=False),
        sa.Column('city', sa.String(length=80), nullable=False),
        sa.Column('pincode', sa.String(length=6), nullable=False),
        sa.Column('business_phone', sa.String(length=20), nullable=False),
        sa.Column('gst_number', sa.String(length=15), nullable=True),
        sa.Column('pan_number', sa.String(length=10), nullable=True),
        sa.Column('bank_account_number', sa.String(length=30), nullable=True),
        sa.Column('ifsc_code', sa.String(length=11), nullable=True),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        *approval_columns('sellers'),
        *timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_sellers_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_sellers'),
        sa.UniqueConstraint('user_id', name='uq_sellers_user_id'),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('seller_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('original_price', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('sku', sa.String(length=64), nullable=True),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('images', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('rating', sa.Numeric(precision=3, scale=2), nullable=False),
        sa.Column('review_count', sa.Integer(), nullable=False),
        *approval_columns('products'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('stock >= 0', name='ck_products_stock_non_negative'),
        sa.CheckConstraint('price > 0', name='ck_products_price_positive'),
        sa.ForeignKeyConstraint(['seller_id'], ['sellers.id'], name='fk_products_seller_id_sellers'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], name='fk_products_category_id_categories'),
        sa.PrimaryKeyConstraint('id', name='pk_products'),
        sa.UniqueConstraint('sku', name='uq_products_sku'),
    )
    op.create_index('ix_products_seller_id', 'products', ['seller_id'])
    op.create_index('ix_products_category_id', 'products', ['category_id'])

    op.create_table(
        'cart_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('quantity > 0', name='ck_cart_items_quantity_positive'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_cart_items_user_id_users'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], name='fk_cart_items_product_id_products'),
        sa.PrimaryKeyConstraint('id', name='pk_cart_items'),
        sa.UniqueConstraint('user_id', 'product_id', name='uq_cart_items_user_product'),
    )
    op.create_index('ix_cart_items_user_id', 'cart_items', ['user_id'])

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('order_number', sa.String(length=40), nullable=False),
        sa.Column('status', enum('order_status'), nullable=False),
        sa.Column('subtotal', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('tax', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('shipping', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('total', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=True),
        sa.Column('payment_method', enum('payment_method'), nullable=False),
        sa.Column('payment_status', enum('payment_status'), nullable=False),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('shipping_address', sa.JSON(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('delivered_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_orders_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_orders'),
        sa.UniqueConstraint('order_number', name='uq_orders_order_number'),
    )
    op.create_index('ix_orders_user_id', 'orders', ['user_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('seller_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('total', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('quantity > 0', name='ck_order_items_quantity_positive'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], name='fk_order_items_order_id_orders'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], name='fk_order_items_product_id_products'),
        sa.ForeignKeyConstraint(['seller_id'], ['sellers.id'], name='fk_order_items_seller_id_sellers'),
        sa.PrimaryKeyConstraint('id', name='pk_order_items'),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('ix_order_items_seller_id', 'order_items', ['seller_id'])

    op.create_table(
        'delivery_boys',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('vehicle_type', sa.String(length=50), nullable=False),
        sa.Column('vehicle_number', sa.String(length=20), nullable=False),
        sa.Column('city', sa.String(length=80), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        *approval_columns('delivery_boys'),
        *timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_delivery_boys_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_delivery_boys'),
        sa.UniqueConstraint('user_id', name='uq_delivery_boys_user_id'),
    )

    op.create_table(
        'delivery_assignments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('delivery_boy_id', sa.Integer(), nullable=False),
        sa.Column('assigned_by', sa.Integer(), nullable=True),
        sa.Column('status', enum('assignment_status'), nullable=False),
        sa.Column('pickup_address', sa.Text(), nullable=True),
        sa.Column('delivery_address', sa.Text(), nullable=False),
        sa.Column('distance_km', sa.Numeric(precision=8, scale=2), nullable=True),
        sa.Column('earning', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('assigned_at', sa.DateTime(), nullable=True),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.Column('picked_up_at', sa.DateTime(), nullable=True),
        sa.Column('on_the_way_at', sa.DateTime(), nullable=True),
        sa.Column('delivered_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], name='fk_delivery_assignments_order_id_orders'),
        sa.ForeignKeyConstraint(['delivery_boy_id'], ['delivery_boys.id'],
                                name='fk_delivery_assignments_delivery_boy_id_delivery_boys'),
        sa.ForeignKeyConstraint(['assigned_by'], ['users.id'], name='fk_delivery_assignments_assigned_by_users'),
        sa.PrimaryKeyConstraint('id', name='pk_delivery_assignments'),
        sa.UniqueConstraint('order_id', name='uq_delivery_assignments_order_id'),
    )
    op.create_index('ix_delivery_assignments_delivery_boy_id', 'delivery_assignments', ['delivery_boy_id'])
    op.create_index('ix_delivery_assignments_status', 'delivery_assignments', ['status'])

    op.create_table(
        'food_vendors',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('restaurant_name', sa.String(length=150), nullable=False),
        sa.Column('cuisine', sa.String(length=100), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('city', sa.String(length=80), nullable=False),
        sa.Column('pincode', sa.String(length=6), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('opening_time', sa.String(length=5), nullable=True),
        sa.Column('closing_time', sa.String(length=5), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('is_open', sa.Boolean(), nullable=False),
        *approval_columns('food_vendors'),
        *timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_food_vendors_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_food_vendors'),
        sa.UniqueConstraint('user_id', name='uq_food_vendors_user_id'),
    )

    op.create_table(
        'food_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('is_veg', sa.Boolean(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        *approval_columns('food_items'),
        *timestamps(),
        sa.CheckConstraint('price > 0', name='ck_food_items_price_positive'),
        sa.ForeignKeyConstraint(['vendor_id'], ['food_vendors.id'], name='fk_food_items_vendor_id_food_vendors'),
        sa.PrimaryKeyConstraint('id', name='pk_food_items'),
    )
    op.create_index('ix_food_items_vendor_id', 'food_items', ['vendor_id'])

    op.create_table(
        'food_orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('vendor_id', sa.Integer(), nullable=False),
        sa.Column('order_number', sa.String(length=40), nullable=False),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('subtotal', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('tax', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('delivery_fee', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('total', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('status', enum('food_order_status'), nullable=False),
        sa.Column('payment_method', enum('payment_method'), nullable=False),
        sa.Column('payment_status', enum('payment_status'), nullable=False),
        sa.Column('delivery_address', sa.JSON(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_food_orders_user_id_users'),
        sa.ForeignKeyConstraint(['vendor_id'], ['food_vendors.id'], name='fk_food_orders_vendor_id_food_vendors'),
        sa.PrimaryKeyConstraint('id', name='pk_food_orders'),
        sa.UniqueConstraint('order_number', name='uq_food_orders_order_number'),
    )
    op.create_index('ix_food_orders_user_id', 'food_orders', ['user_id'])
    op.create_index('ix_food_orders_vendor_id', 'food_orders', ['vendor_id'])
    op.create_index('ix_food_orders_status', 'food_orders', ['status'])

    op.create_table(
        'service_providers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('business_name', sa.String(length=150), nullable=False),
        sa.Column('service_type', sa.String(length=80), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('city', sa.String(length=80), nullable=False),
        sa.Column('pincode', sa.String(length=6), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('hourly_rate', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('experience_years', sa.Integer(), nullable=True),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        *approval_columns('service_providers'),
        *timestamps(),
        sa.CheckConstraint('hourly_rate > 0', name='ck_service_providers_hourly_rate_positive'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_service_providers_user_id_users'),
        sa.PrimaryKeyConstraint('id', name='pk_service_providers'),
        sa.UniqueConstraint('user_id', name='uq_service_providers_user_id'),
    )
    op.create_index('ix_service_providers_service_type', 'service_providers', ['service_type'])

    op.create_table(
        'service_bookings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('provider_id', sa.Integer(), nullable=False),
        sa.Column('scheduled_at', sa.DateTime(), nullable=False),
        sa.Column('hours', sa.Integer(), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('status', enum('booking_status'), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        *timestamps(),
        sa.CheckConstraint('hours > 0', name='ck_service_bookings_hours_positive'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_service_bookings_user_id_users'),
        sa.ForeignKeyConstraint(['provider_id'], ['service_providers.id'],
                                name='fk_service_bookings_provider_id_service_providers'),
        sa.PrimaryKeyConstraint('id', name='pk_service_bookings'),
    )
    op.create_index('ix_service_bookings_user_id', 'service_bookings', ['user_id'])
    op.create_index('ix_service_bookings_provider_id', 'service_bookings', ['provider_id'])
    op.create_index('ix_service_bookings_status', 'service_bookings', ['status'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=True),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_notifications_user_id_users'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], name='fk_notifications_order_id_orders'),
        sa.PrimaryKeyConstraint('id', name='pk_notifications'),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])

    for table in ('sellers', 'products', 'delivery_boys', 'food_vendors', 'food_items', 'service_providers'):
        op.create_index(f'ix_{table}_approval_status', table, ['approval_status'])


def downgrade():
    for table in ('notifications', 'service_bookings', 'service_providers', 'food_orders',
                  'food_items', 'food_vendors', 'delivery_assignments', 'delivery_boys',
                  'order_items', 'orders', 'cart_items', 'products', 'sellers', 'categories', 'users'):
        op.drop_table(table)

    bind = op.get_bind()
    for name, values in ENUMS.items():
        sa.Enum(*values, name=name).drop(bind, checkfirst=True)
