"""Authentication API."""
from flask import Blueprint, g, request
from flask_jwt_extended import jwt_required
from edutrack import limiter
from edutrack.services.auth_service import AuthService
from edutrack.utils.decorators import current_user_id, login_required
from edutrack.utils.helpers import success_response, error_response
from edutrack.utils.validators import Validator

auth_bp = Blueprint("auth", __name__)

@auth_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    return success_response(message="Auth service is running")

@auth_bp.route("/register", methods=["POST"])
@limiter.limit("10 per hour")
def register():
    """Register a student or teacher."""
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return error_response("Request body must be JSON", 400)

    result, error = AuthService.register(data)
    if error:
        status = 409 if error == "Email already exists" else 400
        return error_response(error, status)

    return success_response(data=result, message="Registration successful", status_code=201)

@auth_bp.route("/login", methods=["POST"])
@limiter.limit("5 per minute")
def login():
    """Login with email and password."""
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return error_response("Request body must be JSON", 400)

    email = data.get("email")
    password = data.get("password")

    if not Validator.is_text(email) or not Validator.is_text(password):
        return error_response("Email and password are required", 400)

    result, error = AuthService.login(email, password)
    if error:
        return error_response(error, 401)

    return success_response(data=result, message="Login successful")

@auth_bp.route("/me", methods=["GET"])
@login_required
def get_current_user():
    """Get current user profile."""
    return success_response(data=g.current_user.to_dict())

@auth_bp.route("/refresh", methods=["POST"])
@jwt_required(refresh=True)
def refresh_token():
    """Refresh access token."""
    result, error = AuthService.refresh_token(current_user_id())
    if error:
        return error_response(error, 401)

    return success_response(data=result, message="Token refreshed successfully")
