from datetime import datetime
from decimal import Decimal
from sqlalchemy import CheckConstraint
from sqlalchemy_serializer import SerializerMixin
from extensions import db
from shopnish.models.approval import ApprovalMixin, ApprovalStatus
from shopnish.validators.common import slugify


class Category(db.Model, SerializerMixin):
    __tablename__ = 'categories'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    slug = db.Column(db.String(120), unique=True, nullable=False)
    description = db.Column(db.Text)
    image_url = db.Column(db.String(500))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    products = db.relationship('Product', back_populates='category', lazy=True)

    serialize_only = ('id', 'name', 'slug', 'description', 'image_url', 'created_at')

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if not self.slug and self.name:
            self.slug = slugify(self.name)


class Product(ApprovalMixin, db.Model):
    """Marketplace product listed by a seller"""
    __tablename__ = 'products'

    # Changing any of these sends an approved/rejected product back for review
    REVIEWED_FIELDS = ('name', 'description', 'price', 'original_price', 'category_id', 'images')

    id = db.Column(db.Integer, primary_key=True)
    seller_id = db.Column(db.Integer, db.ForeignKey('sellers.id'), nullable=False, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id'), nullable=False, index=True)

    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    original_price = db.Column(db.Numeric(10, 2))
    sku = db.Column(db.String(64), unique=True)
    stock = db.Column(db.Integer, default=0, nullable=False)
    images = db.Column(db.JSON, default=list)

    is_active = db.Column(db.Boolean, default=True, nullable=False)
    rating = db.Column(db.Numeric(3, 2), default=Decimal('0.00'), nullable=False)
    review_count = db.Column(db.Integer, default=0, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint('stock >= 0', name='stock_non_negative'),
        CheckConstraint('price > 0', name='price_positive'),
    )

    # Relationships
    seller = db.relationship('Seller', back_populates='products')
    category = db.relationship('Category', back_populates='products')

    @property
    def is_purchasable(self):
        """Approved, active, in stock and sold by an approved seller"""
        return (
            self.approval_status == ApprovalStatus.APPROVED
            and self.is_active
            and (self.stock or 0) > 0
            and self.seller is not None
            and self.seller.is_approved
        )

    def is_visible_to(self, seller=None, is_admin=False):
        """Unapproved products are only shown to their seller and to admins"""
        if is_admin:
            return True
        if seller is not None and seller.id == self.seller_id:
            return True
        return self.approval_status == ApprovalStatus.APPROVED and self.is_active

    def decrease_stock(self, quantity):
        if quantity > self.stock:
            raise ValueError(f"Only {self.stock} unit(s) of {self.name} left in stock")
        self.stock -= quantity

    def to_dict(self, include_details=False):
        """Convert product to dictionary"""
        data = {
            'id': self.id,
            'seller_id': self.seller_id,
            'category_id': self.category_id,
            'name': self.name,
            'description': self.description,
            'price': float(self.price) if self.price is not None else None,
            'original_price': float(self.original_price) if self.original_price is not None else None,
            'sku': self.sku,
            'stock': self.stock,
            'images': self.images or [],
            'is_active': self.is_active,
            'rating': float(self.rating) if self.rating is not None else 0.0,
            'review_count': self.review_count,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        data.update(self.approval_dict())

        if include_details:
            data.update({
                'seller': {
                    'id': self.seller.id,
                    'business_name': self.seller.business_name,
                    'city': self.seller.city,
                    'is_verified': self.seller.is_verified,
                } if self.seller else None,
                'category': self.category.to_dict() if self.category else None,
            })

        return data
