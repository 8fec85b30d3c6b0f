"""
Authentication and Authorization Decorators

Access control decorators that load the current user from the database and,
for vendor-style routes, the profile record the route acts on.
The loaded objects are placed on flask.g (g.current_user, g.profile).
"""
from functools import wraps
from flask import jsonify, g
from flask_jwt_extended import verify_jwt_in_request, get_jwt_identity
from extensions import db
from shopnish.models.user import User


def current_user_id():
    """Integer id of the authenticated user, or None"""
    identity = get_jwt_identity()
    return int(identity) if identity is not None else None


def get_current_user(optional=False):
    """Load the authenticated user; with optional=True a missing token yields None"""
    verify_jwt_in_request(optional=optional)
    user_id = current_user_id()
    if user_id is None:
        return None
    return db.session.get(User, user_id)


def login_required(fn):
    """
    Decorator to require an active, existing user
    Usage: @login_required
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        user = get_current_user()

        if not user:
            return jsonify({'error': 'User not found'}), 404

        if not user.is_active:
            return jsonify({'error': 'Account is inactive. Please contact support.'}), 403

        g.current_user = user
        return fn(*args, **kwargs)
    return wrapper


def admin_required(fn):
    """
    Decorator to require admin role
    Usage: @admin_required
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        user = get_current_user()

        if not user:
            return jsonify({'error': 'User not found'}), 404

        if user.role != 'admin':
            return jsonify({'error': 'Admin access required'}), 403

        g.current_user = user
        return fn(*args, **kwargs)
    return wrapper


def profile_required(relation, label, approved=False):
    """
    Decorator factory to require a vendor-style profile on the current user

    relation: User attribute holding the profile ('seller', 'food_vendor', ...)
    label: human name used in error messages
    approved: also require the profile to be admin-approved

    Usage: @profile_required('seller', 'Seller', approved=True)
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = get_current_user()

            if not user:
                return jsonify({'error': 'User not found'}), 404

            profile = getattr(user, relation, None)
            if profile is None:
                return jsonify({'error': f'{label} profile not found'}), 404

            if approved and not profile.is_approved:
                return jsonify({
                    'error': f'Your {label.lower()} account must be approved by an admin first',
                    'approval_status': profile.approval_status.value,
                }), 403

            g.current_user = user
            g.profile = profile
            return fn(*args, **kwargs)
        return wrapper
    return decorator


seller_required = profile_required('seller', 'Seller')
approved_seller_required = profile_required('seller', 'Seller', approved=True)
food_vendor_required = profile_required('food_vendor', 'Food vendor')
approved_food_vendor_required = profile_required('food_vendor', 'Food vendor', approved=True)
service_provider_required = profile_required('service_provider', 'Service provider')
delivery_boy_required = profile_required('delivery_boy', 'Delivery agent')
approved_delivery_boy_required = profile_required('delivery_boy', 'Delivery agent', approved=True)
