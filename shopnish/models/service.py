from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum
from sqlalchemy import Enum, CheckConstraint
from sqlalchemy.orm import validates
from extensions import db
from shopnish.models.approval import ApprovalMixin
from shopnish.validators.common import normalize_phone


class BookingStatus(PyEnum):
    PENDING = 'pending'
    ACCEPTED = 'accepted'
    COMPLETED = 'completed'
    REJECTED = 'rejected'
    CANCELLED = 'cancelled'


class ServiceProvider(ApprovalMixin, db.Model):
    """Local professional offering bookable services (plumber, electrician, tutor...)"""
    __tablename__ = 'service_providers'

    EDITABLE_FIELDS = ('business_name', 'service_type', 'description', 'city', 'pincode',
                       'phone', 'hourly_rate', 'experience_years', 'is_available')

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), unique=True, nullable=False)

    business_name = db.Column(db.String(150), nullable=False)
    service_type = db.Column(db.String(80), nullable=False, index=True)
    description = db.Column(db.Text)
    city = db.Column(db.String(80), nullable=False)
    pincode = db.Column(db.String(6))
    phone = db.Column(db.String(20), nullable=False)
    hourly_rate = db.Column(db.Numeric(10, 2), nullable=False)
    experience_years = db.Column(db.Integer, default=0)
    is_available = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint('hourly_rate > 0', name='hourly_rate_positive'),
    )

    user = db.relationship('User', foreign_keys=[user_id], back_populates='service_provider')
    bookings = db.relationship('ServiceBooking', back_populates='provider', lazy=True)

    @validates('phone')
    def validate_phone(self, key, number):
        return normalize_phone(number)

    @validates('service_type')
    def validate_service_type(self, key, service_type):
        return (service_type or '').strip().lower()

    def to_dict(self):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'business_name': self.business_name,
            'service_type': self.service_type,
            'description': self.description,
            'city': self.city,
            'pincode': self.pincode,
            'phone': self.phone,
            'hourly_rate': float(self.hourly_rate) if self.hourly_rate is not None else None,
            'experience_years': self.experience_years,
            'is_available': self.is_available,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        data.update(self.approval_dict())
        return data


class ServiceBooking(db.Model):
    __tablename__ = 'service_bookings'

    # Transitions the provider drives
    PROVIDER_FLOW = {
        BookingStatus.PENDING: [BookingStatus.ACCEPTED, BookingStatus.REJECTED],
        BookingStatus.ACCEPTED: [BookingStatus.COMPLETED],
    }
    # Transitions the customer drives
    CUSTOMER_FLOW = {
        BookingStatus.PENDING: [BookingStatus.CANCELLED],
        BookingStatus.ACCEPTED: [BookingStatus.CANCELLED],
    }

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    provider_id = db.Column(db.Integer, db.ForeignKey('service_providers.id'), nullable=False, index=True)

    scheduled_at = db.Column(db.DateTime, nullable=False)
    hours = db.Column(db.Integer, default=1, nullable=False)
    address = db.Column(db.Text, nullable=False)
    notes = db.Column(db.Text)
    price = db.Column(db.Numeric(10, 2), nullable=False)

    status = db.Column(Enum(BookingStatus, name='booking_status'),
                       default=BookingStatus.PENDING, nullable=False, index=True)
    completed_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint('hours > 0', name='hours_positive'),
    )

    customer = db.relationship('User', backref=db.backref('service_bookings', lazy=True))
    provider = db.relationship('ServiceProvider', back_populates='bookings')

    @staticmethod
    def quote(provider, hours):
        return (Decimal(provider.hourly_rate) * hours).quantize(Decimal('0.01'))

    def update_status(self, new_status, by_provider):
        flow = self.PROVIDER_FLOW if by_provider else self.CUSTOMER_FLOW
        if new_status not in flow.get(self.status, []):
            raise ValueError(f"Cannot change status from {self.status.value} to {new_status.value}")
        self.status = new_status
        self.updated_at = datetime.utcnow()
        if new_status == BookingStatus.COMPLETED:
            self.completed_at = datetime.utcnow()

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'provider_id': self.provider_id,
            'provider_name': self.provider.business_name if self.provider else None,
            'customer_name': self.customer.full_name if self.customer else None,
            'scheduled_at': self.scheduled_at.isoformat() if self.scheduled_at else None,
            'hours': self.hours,
            'address': self.address,
            'notes': self.notes,
            'price': float(self.price) if self.price is not None else None,
            'status': self.status.value if self.status else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
