from extensions import db, bcrypt
from sqlalchemy.orm import validates
from sqlalchemy_serializer import SerializerMixin

from shopnish.validators.common import normalize_phone


class User(db.Model, SerializerMixin):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    phone = db.Column(db.String(20), unique=True, nullable=True)
    password_hash = db.Column(db.String(128), nullable=False)
    role = db.Column(
        db.Enum("customer", "delivery", "admin", name="user_roles"),
        default="customer",
        nullable=False,
    )
    profile_image_url = db.Column(db.String(500))
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    seller = db.relationship("Seller", foreign_keys="Seller.user_id", back_populates="user", uselist=False)
    delivery_boy = db.relationship("DeliveryBoy", foreign_keys="DeliveryBoy.user_id", back_populates="user", uselist=False)
    food_vendor = db.relationship("FoodVendor", foreign_keys="FoodVendor.user_id", back_populates="user", uselist=False)
    service_provider = db.relationship("ServiceProvider", foreign_keys="ServiceProvider.user_id", back_populates="user", uselist=False)

    serialize_only = ("id", "full_name", "email", "phone", "role", "profile_image_url", "is_active", "created_at")

    @property
    def is_admin(self):
        return self.role == "admin"

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode("utf-8")

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    @validates("email")
    def validate_email(self, key, address):
        address = (address or "").strip().lower()
        if "@" not in address or "." not in address.split("@")[-1]:
            raise ValueError("Invalid email address")
        return address

    @validates("phone")
    def validate_phone(self, key, number):
        # Skip validation if phone is None or empty
        if number is None or str(number).strip() == "":
            return None
        return normalize_phone(number)

    @validates("full_name")
    def validate_full_name(self, key, name):
        name = (name or "").strip()
        if len(name) < 2:
            raise ValueError("Full name must be at least 2 characters")
        return name

    def profile_dict(self):
        """User payload returned by /api/auth/me"""
        data = self.to_dict()
        data.update({
            "is_admin": self.is_admin,
            "is_seller": self.seller is not None,
            "seller_id": self.seller.id if self.seller else None,
            "delivery_boy_id": self.delivery_boy.id if self.delivery_boy else None,
            "food_vendor_id": self.food_vendor.id if self.food_vendor else None,
            "service_provider_id": self.service_provider.id if self.service_provider else None,
        })
        return data
