from datetime import datetime
from sqlalchemy.orm import validates
from extensions import db
from shopnish.models.approval import ApprovalMixin, ApprovalStatus
from shopnish.validators.common import normalize_phone


class Seller(ApprovalMixin, db.Model):
    """Store account of a marketplace vendor"""
    __tablename__ = 'sellers'

    # Fields a seller may change on their own profile
    EDITABLE_FIELDS = (
        'business_name', 'business_type', 'description', 'business_address',
        'city', 'pincode', 'business_phone', 'gst_number', 'pan_number',
        'bank_account_number', 'ifsc_code', 'logo_url',
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), unique=True, nullable=False)

    # Business details
    business_name = db.Column(db.String(150), nullable=False)
    business_type = db.Column(db.String(80))
    description = db.Column(db.Text)
    logo_url = db.Column(db.String(500))

    # Address and contact
    business_address = db.Column(db.Text, nullable=False)
    city = db.Column(db.String(80), nullable=False)
    pincode = db.Column(db.String(6), nullable=False)
    business_phone = db.Column(db.String(20), nullable=False)

    # Tax and payout
    gst_number = db.Column(db.String(15))
    pan_number = db.Column(db.String(10))
    bank_account_number = db.Column(db.String(30))
    ifsc_code = db.Column(db.String(11))

    is_verified = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = db.relationship('User', foreign_keys=[user_id], back_populates='seller')
    products = db.relationship('Product', back_populates='seller', lazy=True,
                               cascade='all, delete-orphan')

    @validates('business_phone')
    def validate_business_phone(self, key, number):
        return normalize_phone(number)

    @validates('gst_number', 'pan_number', 'ifsc_code')
    def validate_tax_ids(self, key, value):
        if value is None or str(value).strip() == '':
            return None
        return str(value).strip().upper()

    def approve(self, admin_id):
        super().approve(admin_id)
        self.is_verified = True

    def reject(self, reason, admin_id):
        super().reject(reason, admin_id)
        self.is_verified = False

    def to_dict(self, include_private=False):
        """Convert seller to dictionary"""
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'business_name': self.business_name,
            'business_type': self.business_type,
            'description': self.description,
            'logo_url': self.logo_url,
            'business_address': self.business_address,
            'city': self.city,
            'pincode': self.pincode,
            'business_phone': self.business_phone,
            'is_verified': self.is_verified,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        data.update(self.approval_dict())

        if include_private:
            data.update({
                'gst_number': self.gst_number,
                'pan_number': self.pan_number,
                'bank_account_number': self.bank_account_number,
                'ifsc_code': self.ifsc_code,
            })

        return data


__all__ = ['Seller', 'ApprovalStatus']
