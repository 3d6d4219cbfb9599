"""Custom decorators for authorization."""
from functools import wraps
from flask import g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from edutrack import db
from edutrack.models.user import User, UserRole
from edutrack.utils.helpers import error_response

def current_user_id() -> int:
    """JWT subjects are strings; user ids are integers."""
    return int(get_jwt_identity())

def role_required(*roles: UserRole):
    """Require a valid access token for an active user holding one of ``roles``.

    The user is loaded once and left on ``g.current_user``.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            verify_jwt_in_request()
            user = db.session.get(User, current_user_id())

            if not user or not user.is_active:
                return error_response("User not found", 404)

            if roles and user.role not in roles:
                names = ' or '.join(role.value.capitalize() for role in roles)
                return error_response(f"{names} access required", 403)

            g.current_user = user
            return f(*args, **kwargs)
        return decorated_function
    return decorator

login_required = role_required()
teacher_required = role_required(UserRole.TEACHER)
student_required = role_required(UserRole.STUDENT)
