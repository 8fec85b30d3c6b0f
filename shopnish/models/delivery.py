from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import Enum
from sqlalchemy.orm import validates
from extensions import db
from shopnish.models.approval import ApprovalMixin


class AssignmentStatus(PyEnum):
    PENDING = 'pending'
    ACCEPTED = 'accepted'
    PICKED_UP = 'picked_up'
    ON_THE_WAY = 'on_the_way'
    DELIVERED = 'delivered'


class DeliveryBoy(ApprovalMixin, db.Model):
    """Delivery agent profile of a user with role 'delivery'"""
    __tablename__ = 'delivery_boys'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), unique=True, nullable=False)

    vehicle_type = db.Column(db.String(50), nullable=False)
    vehicle_number = db.Column(db.String(20), nullable=False)
    city = db.Column(db.String(80), nullable=False)
    is_available = db.Column(db.Boolean, default=True, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = db.relationship('User', foreign_keys=[user_id], back_populates='delivery_boy')
    assignments = db.relationship('DeliveryAssignment', back_populates='delivery_boy', lazy=True)

    @validates('vehicle_number')
    def validate_vehicle_number(self, key, number):
        # Normalize and validate registration plate format
        plate = (number or '').strip().upper()
        if not plate:
            raise ValueError("Vehicle number is required for delivery agents")
        if len(plate) < 6:
            raise ValueError("Vehicle number must be at least 6 characters")
        return plate

    @validates('vehicle_type')
    def validate_vehicle_type(self, key, vehicle):
        vehicle = (vehicle or '').strip().lower()
        if not vehicle:
            raise ValueError("Vehicle type is required for delivery agents")
        return vehicle

    def can_take_assignment(self):
        return self.is_approved and self.is_available and self.user is not None and self.user.is_active

    def to_dict(self):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.user.full_name if self.user else None,
            'phone': self.user.phone if self.user else None,
            'vehicle_type': self.vehicle_type,
            'vehicle_number': self.vehicle_number,
            'city': self.city,
            'is_available': self.is_available,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        data.update(self.approval_dict())
        return data


class DeliveryAssignment(db.Model):
    """Links an order to the delivery agent carrying it"""
    __tablename__ = 'delivery_assignments'

    # Linear hand-off workflow, one step at a time
    STATUS_FLOW = {
        AssignmentStatus.PENDING: [AssignmentStatus.ACCEPTED],
        AssignmentStatus.ACCEPTED: [AssignmentStatus.PICKED_UP],
        AssignmentStatus.PICKED_UP: [AssignmentStatus.ON_THE_WAY],
        AssignmentStatus.ON_THE_WAY: [AssignmentStatus.DELIVERED],
        AssignmentStatus.DELIVERED: [],
    }

    TIMESTAMP_FIELDS = {
        AssignmentStatus.ACCEPTED: 'accepted_at',
        AssignmentStatus.PICKED_UP: 'picked_up_at',
        AssignmentStatus.ON_THE_WAY: 'on_the_way_at',
        AssignmentStatus.DELIVERED: 'delivered_at',
    }

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), unique=True, nullable=False)
    delivery_boy_id = db.Column(db.Integer, db.ForeignKey('delivery_boys.id'), nullable=False, index=True)
    assigned_by = db.Column(db.Integer, db.ForeignKey('users.id'))

    status = db.Column(Enum(AssignmentStatus, name='assignment_status'),
                       default=AssignmentStatus.PENDING, nullable=False, index=True)

    pickup_address = db.Column(db.Text)
    delivery_address = db.Column(db.Text, nullable=False)
    distance_km = db.Column(db.Numeric(8, 2), default=0)
    earning = db.Column(db.Numeric(10, 2), default=0)
    notes = db.Column(db.Text)

    assigned_at = db.Column(db.DateTime, default=datetime.utcnow)
    accepted_at = db.Column(db.DateTime)
    picked_up_at = db.Column(db.DateTime)
    on_the_way_at = db.Column(db.DateTime)
    delivered_at = db.Column(db.DateTime)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    order = db.relationship('Order', back_populates='assignment')
    delivery_boy = db.relationship('DeliveryBoy', back_populates='assignments')

    def next_statuses(self):
        return self.STATUS_FLOW.get(self.status, [])

    def update_status(self, new_status):
        """Advance the assignment one step along the workflow"""
        if new_status not in self.next_statuses():
            raise ValueError(f"Cannot change status from {self.status.value} to {new_status.value}")

        now = datetime.utcnow()
        self.status = new_status
        setattr(self, self.TIMESTAMP_FIELDS[new_status], now)
        self.updated_at = now

    def to_dict(self, include_order=False):
        data = {
            'id': self.id,
            'order_id': self.order_id,
            'delivery_boy_id': self.delivery_boy_id,
            'status': self.status.value if self.status else None,
            'next_statuses': [s.value for s in self.next_statuses()] if self.status else [],
            'pickup_address': self.pickup_address,
            'delivery_address': self.delivery_address,
            'distance_km': float(self.distance_km) if self.distance_km is not None else None,
            'earning': float(self.earning) if self.earning is not None else None,
            'notes': self.notes,
            'assigned_at': self.assigned_at.isoformat() if self.assigned_at else None,
            'accepted_at': self.accepted_at.isoformat() if self.accepted_at else None,
            'picked_up_at': self.picked_up_at.isoformat() if self.picked_up_at else None,
            'on_the_way_at': self.on_the_way_at.isoformat() if self.on_the_way_at else None,
            'delivered_at': self.delivered_at.isoformat() if self.delivered_at else None,
        }

        if include_order and self.order:
            data['order'] = {
                'id': self.order.id,
                'order_number': self.order.order_number,
                'status': self.order.status.value,
                'total': float(self.order.total),
                'payment_method': self.order.payment_method.value,
                'payment_status': self.order.payment_status.value,
                'shipping_address': self.order.shipping_address,
                'customer_name': self.order.customer.full_name if self.order.customer else None,
                'customer_phone': self.order.customer.phone if self.order.customer else None,
            }

        return data
