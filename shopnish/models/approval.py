"""
Approval workflow shared by every admin-gated record
(sellers, products, food vendors, food items, service providers, delivery boys).
"""
from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import Enum
from sqlalchemy.orm import declared_attr
from extensions import db


class ApprovalStatus(PyEnum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'


class ApprovalMixin:
    """Adds approval columns and approve/reject transitions to a model"""

    # Changing any of these sends an approved/rejected record back for review
    REVIEWED_FIELDS = ()

    @declared_attr
    def approval_status(cls):
        return db.Column(Enum(ApprovalStatus, name='approval_status'),
                         default=ApprovalStatus.PENDING, nullable=False, index=True)

    @declared_attr
    def rejection_reason(cls):
        return db.Column(db.Text)

    @declared_attr
    def approved_at(cls):
        return db.Column(db.DateTime)

    @declared_attr
    def approved_by(cls):
        return db.Column(db.Integer, db.ForeignKey('users.id'))

    @property
    def is_approved(self):
        return self.approval_status == ApprovalStatus.APPROVED

    @property
    def is_pending(self):
        return self.approval_status in (None, ApprovalStatus.PENDING)

    def approve(self, admin_id):
        """Mark the record approved by the given admin"""
        if self.approval_status == ApprovalStatus.APPROVED:
            raise ValueError(f"{self.__class__.__name__} is already approved")
        self.approval_status = ApprovalStatus.APPROVED
        self.rejection_reason = None
        self.approved_at = datetime.utcnow()
        self.approved_by = admin_id

    def reject(self, reason, admin_id):
        """Mark the record rejected with a reason"""
        reason = (reason or '').strip()
        if not reason:
            raise ValueError("A rejection reason is required")
        self.approval_status = ApprovalStatus.REJECTED
        self.rejection_reason = reason
        self.approved_at = datetime.utcnow()
        self.approved_by = admin_id

    def resubmit(self):
        """Send the record back to the admin queue after an edit"""
        self.approval_status = ApprovalStatus.PENDING
        self.rejection_reason = None
        self.approved_at = None
        self.approved_by = None

    def apply_update(self, fields):
        """Apply owner edits; returns True when the record went back to review"""
        needs_review = False
        for key, value in fields.items():
            if key in self.REVIEWED_FIELDS and getattr(self, key) != value:
                needs_review = True
            setattr(self, key, value)

        if needs_review and self.approval_status != ApprovalStatus.PENDING:
            self.resubmit()
            return True
        return False

    def approval_dict(self):
        return {
            'approval_status': self.approval_status.value if self.approval_status else None,
            'rejection_reason': self.rejection_reason,
            'approved_at': self.approved_at.isoformat() if self.approved_at else None,
            'approved_by': self.approved_by,
        }
