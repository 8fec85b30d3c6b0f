from functools import wraps
from flask_jwt_extended import (
    verify_jwt_in_request,
    get_jwt
)
from flask import jsonify

def role_required(*allowed_roles):
    """Check the role claim stamped into the access token at login"""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()

            claims = get_jwt()
            user_role = claims.get("role")

            if user_role not in allowed_roles:
                return jsonify({
                    "error": "You are not authorized to access this resource"
                }), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator


delivery_role_required = role_required("delivery") #only delivery agents can access
