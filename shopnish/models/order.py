import random
import string
import time
from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import Enum, CheckConstraint
from extensions import db


class OrderStatus(PyEnum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    OUT_FOR_DELIVERY = 'out_for_delivery'
    DELIVERED = 'delivered'
    CANCELLED = 'cancelled'


class PaymentStatus(PyEnum):
    PENDING = 'pending'
    PAID = 'paid'
    FAILED = 'failed'
    REFUNDED = 'refunded'
    CANCELLED = 'cancelled'


class PaymentMethod(PyEnum):
    COD = 'cod'
    CARD = 'card'
    UPI = 'upi'


def generate_order_number(prefix='ORD'):
    """ORD-<epoch millis>-<9 random base36 chars>"""
    millis = int(time.time() * 1000)
    random_part = ''.join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"{prefix}-{millis}-{random_part}"


class Order(db.Model):
    """Customer order created at checkout from the cart"""
    __tablename__ = 'orders'

    STATUS_FLOW = {
        OrderStatus.PENDING: [OrderStatus.CONFIRMED, OrderStatus.CANCELLED],
        OrderStatus.CONFIRMED: [OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED],
        OrderStatus.OUT_FOR_DELIVERY: [OrderStatus.DELIVERED],
        OrderStatus.DELIVERED: [],
        OrderStatus.CANCELLED: [],
    }

    PAYMENT_FLOW = {
        PaymentStatus.PENDING: [PaymentStatus.PAID, PaymentStatus.FAILED, PaymentStatus.CANCELLED],
        PaymentStatus.FAILED: [PaymentStatus.PAID, PaymentStatus.PENDING, PaymentStatus.CANCELLED],
        PaymentStatus.PAID: [PaymentStatus.REFUNDED],
        PaymentStatus.REFUNDED: [],
        PaymentStatus.CANCELLED: [],
    }

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    order_number = db.Column(db.String(40), unique=True, nullable=False)
    status = db.Column(Enum(OrderStatus, name='order_status'), default=OrderStatus.PENDING, nullable=False, index=True)

    # Pricing breakdown
    subtotal = db.Column(db.Numeric(10, 2), nullable=False)
    tax = db.Column(db.Numeric(10, 2), nullable=False)
    shipping = db.Column(db.Numeric(10, 2), nullable=False)
    total = db.Column(db.Numeric(10, 2), nullable=False)
    currency = db.Column(db.String(3), default='INR')

    # Payment
    payment_method = db.Column(Enum(PaymentMethod, name='payment_method'), default=PaymentMethod.COD, nullable=False)
    payment_status = db.Column(Enum(PaymentStatus, name='payment_status'), default=PaymentStatus.PENDING, nullable=False)
    paid_at = db.Column(db.DateTime)

    shipping_address = db.Column(db.JSON, nullable=False)
    notes = db.Column(db.Text)

    delivered_at = db.Column(db.DateTime)
    cancelled_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    customer = db.relationship('User', backref=db.backref('orders', lazy=True))
    items = db.relationship('OrderItem', back_populates='order', lazy=True,
                            cascade='all, delete-orphan', order_by='OrderItem.id')
    assignment = db.relationship('DeliveryAssignment', back_populates='order', uselist=False,
                                 cascade='all, delete-orphan')

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if not self.order_number:
            self.order_number = generate_order_number()

    def can_cancel(self):
        """Customers may cancel until the parcel is picked up"""
        return self.status in [OrderStatus.PENDING, OrderStatus.CONFIRMED]

    def update_status(self, new_status):
        """Update order status with validation"""
        if new_status not in self.STATUS_FLOW.get(self.status, []):
            raise ValueError(f"Cannot change status from {self.status.value} to {new_status.value}")

        self.status = new_status
        self.updated_at = datetime.utcnow()

        if new_status == OrderStatus.DELIVERED:
            self.delivered_at = datetime.utcnow()
            if self.payment_method == PaymentMethod.COD and self.payment_status == PaymentStatus.PENDING:
                self.update_payment_status(PaymentStatus.PAID)
        elif new_status == OrderStatus.CANCELLED:
            self.cancelled_at = datetime.utcnow()

    def cancel(self):
        """Cancel the order, put its units back in stock and settle the payment"""
        self.update_status(OrderStatus.CANCELLED)

        if self.payment_status == PaymentStatus.PAID:
            self.update_payment_status(PaymentStatus.REFUNDED)
        elif self.payment_status in (PaymentStatus.PENDING, PaymentStatus.FAILED):
            self.update_payment_status(PaymentStatus.CANCELLED)

        for line in self.items:
            if line.product is not None:
                line.product.stock += line.quantity

    def update_payment_status(self, new_status):
        """Update payment status with validation"""
        if new_status not in self.PAYMENT_FLOW.get(self.payment_status, []):
            raise ValueError(
                f"Cannot change payment status from {self.payment_status.value} to {new_status.value}"
            )
        self.payment_status = new_status
        if new_status == PaymentStatus.PAID:
            self.paid_at = datetime.utcnow()

    def seller_ids(self):
        return {item.seller_id for item in self.items}

    def to_dict(self, include_items=False, seller_id=None):
        """Convert order to dictionary; seller_id limits items to one seller"""
        data = {
            'id': self.id,
            'order_number': self.order_number,
            'user_id': self.user_id,
            'status': self.status.value if self.status else None,
            'subtotal': float(self.subtotal) if self.subtotal is not None else None,
            'tax': float(self.tax) if self.tax is not None else None,
            'shipping': float(self.shipping) if self.shipping is not None else None,
            'total': float(self.total) if self.total is not None else None,
            'currency': self.currency,
            'payment_method': self.payment_method.value if self.payment_method else None,
            'payment_status': self.payment_status.value if self.payment_status else None,
            'paid_at': self.paid_at.isoformat() if self.paid_at else None,
            'shipping_address': self.shipping_address,
            'notes': self.notes,
            'delivered_at': self.delivered_at.isoformat() if self.delivered_at else None,
            'cancelled_at': self.cancelled_at.isoformat() if self.cancelled_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

        if include_items:
            items = self.items
            if seller_id is not None:
                items = [item for item in items if item.seller_id == seller_id]
            data['items'] = [item.to_dict() for item in items]
            data['assignment'] = self.assignment.to_dict() if self.assignment else None

        return data


class OrderItem(db.Model):
    """Snapshot of one cart line at checkout"""
    __tablename__ = 'order_items'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id'), nullable=False)
    seller_id = db.Column(db.Integer, db.ForeignKey('sellers.id'), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    total = db.Column(db.Numeric(10, 2), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint('quantity > 0', name='quantity_positive'),
    )

    order = db.relationship('Order', back_populates='items')
    product = db.relationship('Product')
    seller = db.relationship('Seller')

    def to_dict(self):
        return {
            'id': self.id,
            'order_id': self.order_id,
            'product_id': self.product_id,
            'seller_id': self.seller_id,
            'product_name': self.product.name if self.product else None,
            'seller_name': self.seller.business_name if self.seller else None,
            'quantity': self.quantity,
            'price': float(self.price),
            'total': float(self.total),
        }
