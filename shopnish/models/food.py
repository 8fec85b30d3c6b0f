from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import Enum, CheckConstraint
from sqlalchemy.orm import validates
from extensions import db
from shopnish.models.approval import ApprovalMixin, ApprovalStatus
from shopnish.models.order import PaymentMethod, PaymentStatus, generate_order_number
from shopnish.validators.common import normalize_phone


class FoodOrderStatus(PyEnum):
    PENDING = 'pending'
    PREPARING = 'preparing'
    READY = 'ready'
    OUT_FOR_DELIVERY = 'out_for_delivery'
    DELIVERED = 'delivered'
    CANCELLED = 'cancelled'


class FoodVendor(ApprovalMixin, db.Model):
    """Restaurant or home kitchen selling cooked food"""
    __tablename__ = 'food_vendors'

    EDITABLE_FIELDS = ('restaurant_name', 'cuisine', 'description', 'address', 'city',
                       'pincode', 'phone', 'opening_time', 'closing_time', 'is_open', 'image_url')

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), unique=True, nullable=False)

    restaurant_name = db.Column(db.String(150), nullable=False)
    cuisine = db.Column(db.String(100))
    description = db.Column(db.Text)
    address = db.Column(db.Text, nullable=False)
    city = db.Column(db.String(80), nullable=False)
    pincode = db.Column(db.String(6))
    phone = db.Column(db.String(20), nullable=False)
    opening_time = db.Column(db.String(5))  # "HH:MM"
    closing_time = db.Column(db.String(5))
    image_url = db.Column(db.String(500))
    is_open = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship('User', foreign_keys=[user_id], back_populates='food_vendor')
    items = db.relationship('FoodItem', back_populates='vendor', lazy=True, cascade='all, delete-orphan')

    @validates('phone')
    def validate_phone(self, key, number):
        return normalize_phone(number)

    def to_dict(self):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'restaurant_name': self.restaurant_name,
            'cuisine': self.cuisine,
            'description': self.description,
            'address': self.address,
            'city': self.city,
            'pincode': self.pincode,
            'phone': self.phone,
            'opening_time': self.opening_time,
            'closing_time': self.closing_time,
            'image_url': self.image_url,
            'is_open': self.is_open,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        data.update(self.approval_dict())
        return data


class FoodItem(ApprovalMixin, db.Model):
    __tablename__ = 'food_items'

    REVIEWED_FIELDS = ('name', 'description', 'price', 'image_url')

    id = db.Column(db.Integer, primary_key=True)
    vendor_id = db.Column(db.Integer, db.ForeignKey('food_vendors.id'), nullable=False, index=True)

    name = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    is_veg = db.Column(db.Boolean, default=True, nullable=False)
    is_available = db.Column(db.Boolean, default=True, nullable=False)
    image_url = db.Column(db.String(500))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint('price > 0', name='price_positive'),
    )

    vendor = db.relationship('FoodVendor', back_populates='items')

    @property
    def is_orderable(self):
        return (
            self.approval_status == ApprovalStatus.APPROVED
            and self.is_available
            and self.vendor is not None
            and self.vendor.is_approved
            and self.vendor.is_open
        )

    def to_dict(self, include_vendor=False):
        data = {
            'id': self.id,
            'vendor_id': self.vendor_id,
            'name': self.name,
            'description': self.description,
            'price': float(self.price) if self.price is not None else None,
            'is_veg': self.is_veg,
            'is_available': self.is_available,
            'image_url': self.image_url,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        data.update(self.approval_dict())
        if include_vendor and self.vendor:
            data['vendor'] = {'id': self.vendor.id, 'restaurant_name': self.vendor.restaurant_name}
        return data


class FoodOrder(db.Model):
    __tablename__ = 'food_orders'

    # Vendor-driven kitchen workflow
    STATUS_FLOW = {
        FoodOrderStatus.PENDING: [FoodOrderStatus.PREPARING, FoodOrderStatus.CANCELLED],
        FoodOrderStatus.PREPARING: [FoodOrderStatus.READY],
        FoodOrderStatus.READY: [FoodOrderStatus.OUT_FOR_DELIVERY],
        FoodOrderStatus.OUT_FOR_DELIVERY: [FoodOrderStatus.DELIVERED],
        FoodOrderStatus.DELIVERED: [],
        FoodOrderStatus.CANCELLED: [],
    }

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    vendor_id = db.Column(db.Integer, db.ForeignKey('food_vendors.id'), nullable=False, index=True)
    order_number = db.Column(db.String(40), unique=True, nullable=False)

    # [{food_item_id, name, price, quantity, total}]
    items = db.Column(db.JSON, nullable=False)

    subtotal = db.Column(db.Numeric(10, 2), nullable=False)
    tax = db.Column(db.Numeric(10, 2), nullable=False)
    delivery_fee = db.Column(db.Numeric(10, 2), nullable=False)
    total = db.Column(db.Numeric(10, 2), nullable=False)

    status = db.Column(Enum(FoodOrderStatus, name='food_order_status'),
                       default=FoodOrderStatus.PENDING, nullable=False, index=True)
    payment_method = db.Column(Enum(PaymentMethod, name='payment_method'), default=PaymentMethod.COD, nullable=False)
    payment_status = db.Column(Enum(PaymentStatus, name='payment_status'), default=PaymentStatus.PENDING, nullable=False)
    delivery_address = db.Column(db.JSON, nullable=False)
    notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer = db.relationship('User', backref=db.backref('food_orders', lazy=True))
    vendor = db.relationship('FoodVendor', backref=db.backref('orders', lazy=True))

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if not self.order_number:
            self.order_number = generate_order_number('FOOD')

    def update_status(self, new_status):
        if new_status not in self.STATUS_FLOW.get(self.status, []):
            raise ValueError(f"Cannot change status from {self.status.value} to {new_status.value}")
        self.status = new_status
        self.updated_at = datetime.utcnow()

        if new_status == FoodOrderStatus.DELIVERED and self.payment_method == PaymentMethod.COD:
            self.payment_status = PaymentStatus.PAID
        elif new_status == FoodOrderStatus.CANCELLED and self.payment_status == PaymentStatus.PENDING:
            self.payment_status = PaymentStatus.CANCELLED

    def to_dict(self):
        return {
            'id': self.id,
            'order_number': self.order_number,
            'user_id': self.user_id,
            'vendor_id': self.vendor_id,
            'restaurant_name': self.vendor.restaurant_name if self.vendor else None,
            'items': self.items,
            'subtotal': float(self.subtotal),
            'tax': float(self.tax),
            'delivery_fee': float(self.delivery_fee),
            'total': float(self.total),
            'status': self.status.value if self.status else None,
            'payment_method': self.payment_method.value if self.payment_method else None,
            'payment_status': self.payment_status.value if self.payment_status else None,
            'delivery_address': self.delivery_address,
            'notes': self.notes,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
