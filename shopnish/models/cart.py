from datetime import datetime
from decimal import Decimal
from sqlalchemy import CheckConstraint, UniqueConstraint
from extensions import db


class CartItem(db.Model):
    """One product line in a customer's cart"""
    __tablename__ = 'cart_items'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id'), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'product_id', name='uq_cart_items_user_product'),
        CheckConstraint('quantity > 0', name='quantity_positive'),
    )

    user = db.relationship('User', backref=db.backref('cart_items', lazy=True))
    product = db.relationship('Product', backref=db.backref('cart_items', lazy=True,
                                                           cascade='all, delete-orphan'))

    @property
    def line_total(self):
        if not self.product or self.product.price is None:
            return Decimal('0.00')
        return (Decimal(self.product.price) * self.quantity).quantize(Decimal('0.01'))

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'product_id': self.product_id,
            'quantity': self.quantity,
            'line_total': float(self.line_total),
            'product': self.product.to_dict(include_details=True) if self.product else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
