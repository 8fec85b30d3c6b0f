import logging

from flask import request, make_response
from flask_restful import Resource
from sqlalchemy.exc import IntegrityError
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    jwt_required,
    get_jwt_identity,
    set_access_cookies,
    set_refresh_cookies,
    unset_jwt_cookies,
)
from extensions import db
from shopnish.models.user import User
from shopnish.validators.common import normalize_phone

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
SELF_REGISTER_ROLES = ("customer", "delivery")


def issue_tokens(user, message, status):
    """Build the login/register response with tokens in the body and in cookies"""
    access_token = create_access_token(identity=str(user.id))
    refresh_token = create_refresh_token(identity=str(user.id))

    response = make_response({
        "message": message,
        "user": user.profile_dict(),
        "access_token": access_token,
        "refresh_token": refresh_token,
    }, status)
    set_access_cookies(response, access_token)
    set_refresh_cookies(response, refresh_token)
    return response


#POST /api/auth/register -> auto-login
class RegisterResource(Resource):
    def post(self):
        data = request.get_json(silent=True)

        if not isinstance(data, dict) or not data:
            return {"error": "Request body is required"}, 400

        # Validate required fields
        for field in ("full_name", "email", "password"):
            if not str(data.get(field) or "").strip():
                return {"error": f"{field} is required"}, 400

        if len(str(data["password"])) < MIN_PASSWORD_LENGTH:
            return {"error": f"Password must be at least {MIN_PASSWORD_LENGTH} characters"}, 422

        role = data.get("role", "customer")
        if role not in SELF_REGISTER_ROLES:
            return {"error": "Invalid role"}, 400

        try:
            email = str(data["email"]).strip().lower()
            if User.query.filter_by(email=email).first():
                return {"error": "Email already taken"}, 422

            phone = None
            if data.get("phone"):
                phone = normalize_phone(data["phone"])
                # Check for existing phone AFTER formatting
                if User.query.filter_by(phone=phone).first():
                    return {"error": "Phone number already taken"}, 422

            user = User(
                full_name=data["full_name"],
                email=email,
                phone=phone,
                role=role,
                profile_image_url=data.get("profile_image_url"),
            )
            user.set_password(data["password"])

            db.session.add(user)
            db.session.commit()

            logger.info("Registered %s user #%s", role, user.id)
            return issue_tokens(user, "User registered successfully", 201)

        except ValueError as e:
            db.session.rollback()
            return {"error": str(e)}, 422
        except IntegrityError:
            db.session.rollback()
            logger.warning("Registration integrity error for %s", data.get("email"))
            return {"error": "Email or phone number already taken"}, 422


#POST /api/auth/login -> store access_token, user.role
class LoginResource(Resource):
    def post(self):
        data = request.get_json(silent=True)

        if not isinstance(data, dict) or not data:
            return {"error": "Request body is required"}, 400

        email = str(data.get("email") or "").strip().lower()
        password = data.get("password")

        if not all([email, password]):
            return {"error": "Email and password are required"}, 400

        user = User.query.filter_by(email=email).first()
        if not user or not user.check_password(password):
            return {"error": "Invalid email or password"}, 401
        if not user.is_active:
            return {"error": "Account is inactive. Please contact support."}, 403

        return issue_tokens(user, "Login successful", 200)


class MeResource(Resource):
    @jwt_required()
    def get(self):
        user = db.session.get(User, int(get_jwt_identity()))

        if not user:
            return {"error": "User not found"}, 404

        return user.profile_dict(), 200


#refresh token endpoint
class RefreshResource(Resource):
    @jwt_required(refresh=True)
    def post(self):
        user = db.session.get(User, int(get_jwt_identity()))

        if not user:
            return {"error": "User not found"}, 404
        if not user.is_active:
            return {"error": "Account is inactive. Please contact support."}, 403

        access_token = create_access_token(identity=str(user.id))
        response = make_response({"access_token": access_token}, 200)
        set_access_cookies(response, access_token)
        return response


class LogoutResource(Resource):
    def post(self):
        response = make_response({"message": "Logged out"}, 200)
        unset_jwt_cookies(response)
        return response
