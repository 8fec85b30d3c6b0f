# shopnish/models/notification.py
"""
Notification Model
Stores in-app notifications for users about orders, approvals and deliveries
"""
from extensions import db
from datetime import datetime
from sqlalchemy_serializer import SerializerMixin


class Notification(db.Model, SerializerMixin):
    __tablename__ = 'notifications'

    # Primary Key
    id = db.Column(db.Integer, primary_key=True)

    # Foreign Keys
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    order_id = db.Column(db.Integer, db.ForeignKey('orders.id'), nullable=True)

    # Notis data
    type = db.Column(db.String(50), nullable=False)
    message = db.Column(db.Text, nullable=False)
    is_read = db.Column(db.Boolean, default=False)
    read_at = db.Column(db.DateTime)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    user = db.relationship('User', backref=db.backref('notifications', lazy=True))

    serialize_rules = ('-user.notifications',)

    @classmethod
    def notify(cls, user_id, type, message, order_id=None):
        """Queue a notification on the current session"""
        notification = cls(user_id=user_id, order_id=order_id, type=type, message=message)
        db.session.add(notification)
        return notification

    def mark_read(self):
        if not self.is_read:
            self.is_read = True
            self.read_at = datetime.utcnow()

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'order_id': self.order_id,
            'type': self.type,
            'message': self.message,
            'is_read': bool(self.is_read),
            'read_at': self.read_at.isoformat() if self.read_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
