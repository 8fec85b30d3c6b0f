import itertools
from decimal import Decimal

import pytest
from flask_jwt_extended import create_access_token, create_refresh_token

from config import Config
from extensions import db
from shopnish import create_app
from shopnish.services.pricing_service import PricingService, to_money
from shopnish.models import (
    User, Seller, Category, Product, DeliveryBoy, FoodVendor, FoodItem, ServiceProvider,
    Order, OrderItem, PaymentMethod,
)

PHONE = '+918123456789'

ADDRESS = {
    'full_name': 'Asha Rao',
    'phone': PHONE,
    'address_line': 'Flat 4B, Lake View Apartments',
    'city': 'Bengaluru',
    'pincode': '560001',
}


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    JWT_SECRET_KEY = 'test-secret-key-with-enough-length-for-hs256'
    JWT_COOKIE_CSRF_PROTECT = False
    BCRYPT_LOG_ROUNDS = 4
    MAIL_SUPPRESS_SEND = True
    GOOGLE_MAPS_API_KEY = None


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = itertools.count(1)

    def _make_user(role='customer', email=None, password='password123', full_name='Test User',
                   phone=None, is_active=True):
        user = User(
            full_name=full_name,
            email=email or f'user{next(counter)}@example.com',
            phone=phone,
            role=role,
            is_active=is_active,
        )
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user
    return _make_user


@pytest.fixture
def admin(make_user):
    return make_user(role='admin', email='admin@example.com', full_name='Admin User')


@pytest.fixture
def customer(make_user):
    return make_user(email='customer@example.com', full_name='Customer User')


@pytest.fixture
def auth_headers(app):
    def _auth_headers(user):
        return {'Authorization': f'Bearer {create_access_token(identity=str(user.id))}'}
    return _auth_headers


@pytest.fixture
def refresh_headers(app):
    def _refresh_headers(user):
        return {'Authorization': f'Bearer {create_refresh_token(identity=str(user.id))}'}
    return _refresh_headers


@pytest.fixture
def make_seller(make_user, admin):
    def _make_seller(user=None, approved=True, business_name='Sharma Kitchenware'):
        user = user or make_user(full_name='Seller User')
        seller = Seller(
            user_id=user.id,
            business_name=business_name,
            business_address='12 MG Road',
            city='Pune',
            pincode='411001',
            business_phone=PHONE,
        )
        db.session.add(seller)
        db.session.flush()
        if approved:
            seller.approve(admin.id)
        db.session.commit()
        return seller
    return _make_seller


@pytest.fixture
def category(app):
    category = Category(name='Home & Kitchen')
    db.session.add(category)
    db.session.commit()
    return category


@pytest.fixture
def make_product(admin, category):
    def _make_product(seller, name='Steel Bottle', price='500.00', stock=10, approved=True, **fields):
        product = Product(
            seller_id=seller.id,
            category_id=category.id,
            name=name,
            description=f'{name} description',
            price=Decimal(price),
            stock=stock,
            images=[],
            **fields
        )
        db.session.add(product)
        db.session.flush()
        if approved:
            product.approve(admin.id)
        db.session.commit()
        return product
    return _make_product


@pytest.fixture
def make_agent(make_user, admin):
    def _make_agent(approved=True, is_available=True, full_name='Ravi Kumar'):
        user = make_user(role='delivery', full_name=full_name)
        agent = DeliveryBoy(
            user_id=user.id,
            vehicle_type='scooter',
            vehicle_number='KA01AB1234',
            city='Bengaluru',
            is_available=is_available,
        )
        db.session.add(agent)
        db.session.flush()
        if approved:
            agent.approve(admin.id)
        db.session.commit()
        return agent
    return _make_agent


@pytest.fixture
def make_food_vendor(make_user, admin):
    def _make_food_vendor(approved=True, is_open=True):
        user = make_user(full_name='Kitchen Owner')
        vendor = FoodVendor(
            user_id=user.id,
            restaurant_name='Annapurna Mess',
            address='3rd Cross, Jayanagar',
            city='Bengaluru',
            phone=PHONE,
            is_open=is_open,
        )
        db.session.add(vendor)
        db.session.flush()
        if approved:
            vendor.approve(admin.id)
        db.session.commit()
        return vendor
    return _make_food_vendor


@pytest.fixture
def make_food_item(admin):
    def _make_food_item(vendor, name='Masala Dosa', price='200.00', approved=True):
        item = FoodItem(vendor_id=vendor.id, name=name, price=Decimal(price), is_veg=True)
        db.session.add(item)
        db.session.flush()
        if approved:
            item.approve(admin.id)
        db.session.commit()
        return item
    return _make_food_item


@pytest.fixture
def make_provider(make_user, admin):
    def _make_provider(approved=True, hourly_rate='300.00'):
        user = make_user(full_name='Ravi Electricals Owner')
        provider = ServiceProvider(
            user_id=user.id,
            business_name='Ravi Electricals',
            service_type='Electrician',
            city='Pune',
            phone=PHONE,
            hourly_rate=Decimal(hourly_rate),
        )
        db.session.add(provider)
        db.session.flush()
        if approved:
            provider.approve(admin.id)
        db.session.commit()
        return provider
    return _make_provider


@pytest.fixture
def make_order(customer):
    def _make_order(product, quantity=2, user=None, payment_method=PaymentMethod.COD):
        user = user or customer
        totals = PricingService.calculate_order_totals([(product.price, quantity)])
        order = Order(
            user_id=user.id,
            payment_method=payment_method,
            shipping_address=dict(ADDRESS),
            **totals
        )
        order.items.append(OrderItem(
            product_id=product.id,
            seller_id=product.seller_id,
            quantity=quantity,
            price=product.price,
            total=to_money(product.price * quantity),
        ))
        product.decrease_stock(quantity)
        db.session.add(order)
        db.session.commit()
        return order
    return _make_order
