import logging
import os
from decimal import Decimal
from typing import Optional

from extensions import db
from shopnish.models import Category, Product, Seller, User

logger = logging.getLogger('shopnish.seed')

DEFAULT_CATEGORIES = [
    ("Groceries", "Staples, snacks and daily essentials"),
    ("Home & Kitchen", "Cookware, storage and home care"),
    ("Electronics", "Phones, accessories and small appliances"),
    ("Fashion", "Clothing, footwear and accessories"),
    ("Books & Stationery", "Books, notebooks and office supplies"),
]


def seed_data(app=None, admin_email: Optional[str] = None, admin_password: Optional[str] = None):
    """Create initial data: admin, sample customer/delivery users, categories and a demo store.

    - Uses ADMIN_EMAIL and ADMIN_PASSWORD environment variables when available.
    - Idempotent: will not recreate rows that already exist.
    - Ensures DB tables exist by calling db.create_all().
    """
    if app is None:
        from shopnish import create_app
        app = create_app()

    admin_email = admin_email or os.getenv("ADMIN_EMAIL", "admin@shopnish.in")
    admin_password = admin_password or os.getenv("ADMIN_PASSWORD", "adminpass")
    sample_password = os.getenv("SAMPLE_PASSWORD", "password")

    with app.app_context():
        db.create_all()

        # Create admin if missing
        admin = User.query.filter_by(email=admin_email).first()
        if admin:
            logger.info("Admin user already exists: %s", admin_email)
        else:
            admin = User(full_name="Admin User", email=admin_email, role="admin", is_active=True)
            admin.set_password(admin_password)
            db.session.add(admin)
            db.session.flush()
            logger.info("Created admin user: %s", admin_email)

        # Sample users
        samples = [
            {"email": "customer@shopnish.in", "role": "customer", "full_name": "Customer User"},
            {"email": "delivery@shopnish.in", "role": "delivery", "full_name": "Delivery User"},
            {"email": "seller@shopnish.in", "role": "customer", "full_name": "Seller User"},
        ]
        for s in samples:
            if not User.query.filter_by(email=s["email"]).first():
                u = User(full_name=s["full_name"], email=s["email"], role=s["role"], is_active=True)
                u.set_password(sample_password)
                db.session.add(u)
                logger.info("Created %s user: %s", s["role"], s["email"])
        db.session.flush()

        # Categories
        for name, description in DEFAULT_CATEGORIES:
            category = Category(name=name, description=description)
            if not Category.query.filter_by(slug=category.slug).first():
                db.session.add(category)
        db.session.flush()

        # Demo store, approved, with one approved product
        seller_user = User.query.filter_by(email="seller@shopnish.in").first()
        if seller_user.seller is None:
            seller = Seller(
                user_id=seller_user.id,
                business_name="Shopnish Demo Store",
                business_address="1 MG Road",
                city="Bengaluru",
                pincode="560001",
                business_phone="+919876543210",
            )
            db.session.add(seller)
            db.session.flush()
            seller.approve(admin.id)

            product = Product(
                seller_id=seller.id,
                category_id=Category.query.filter_by(slug="groceries").first().id,
                name="Basmati Rice 5kg",
                description="Aged long-grain basmati rice",
                price=Decimal("649.00"),
                original_price=Decimal("799.00"),
                stock=100,
                images=[],
            )
            db.session.add(product)
            db.session.flush()
            product.approve(admin.id)
            logger.info("Created demo store with one product")

        db.session.commit()


if __name__ == "__main__":
    from dotenv import load_dotenv

    load_dotenv()
    seed_data()
