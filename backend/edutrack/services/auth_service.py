"""Authentication service for user management."""
from typing import Optional, Tuple

from flask_jwt_extended import create_access_token, create_refresh_token

from edutrack import db
from edutrack.utils.dates import naive_utc, utc_now
from edutrack.models.user import User, UserRole
from edutrack.utils.validators import Validator


def issue_tokens(user: User) -> dict:
    identity = str(user.id)
    return {
        "access_token": create_access_token(identity=identity, additional_claims={"role": user.role.value}),
        "refresh_token": create_refresh_token(identity=identity),
    }


class AuthService:
    @staticmethod
    def login(email: str, password: str) -> Tuple[Optional[dict], Optional[str]]:
        """Authenticate user and return tokens."""
        if not email or not password:
            return None, "Email and password are required"

        if not Validator.validate_email(email):
            return None, "Invalid email format"

        user = User.query.filter_by(email=email.lower().strip()).first()

        if not user or not user.check_password(password):
            return None, "Invalid email or password"

        if not user.is_active:
            return None, "Account is deactivated"

        user.last_login = naive_utc(utc_now())
        db.session.commit()

        result = issue_tokens(user)
        result["user"] = user.to_dict()
        return result, None

    @staticmethod
    def register(data: dict) -> Tuple[Optional[dict], Optional[str]]:
        """Register a student or teacher account."""
        check = Validator.validate_required_fields(data, ["email", "password", "name", "department"])
        if not check["is_valid"]:
            return None, check["errors"][0]

        email = str(data["email"]).lower().strip()
        if not Validator.validate_email(email):
            return None, "Invalid email format"

        password_check = Validator.validate_password(data["password"])
        if not password_check["is_valid"]:
            return None, password_check["errors"][0]

        name_check = Validator.validate_name(data["name"])
        if not name_check["is_valid"]:
            return None, name_check["errors"][0]

        try:
            role = UserRole(str(data.get("role", "student")).lower())
        except ValueError:
            return None, "Invalid role"
        if role == UserRole.ADMIN:
            return None, "Administrators cannot self-register"

        placement = Validator.validate_placement(role, data)
        if not placement["is_valid"]:
            return None, placement["errors"][0]

        user = User(
            email=email,
            name=data["name"].strip(),
            role=role,
            department=data["department"]
        )

        if role == UserRole.STUDENT:
            user.year = data["year"]
        else:
            user.years_taught = sorted(set(data["years_taught"]))
            user.subject = data["subject"].strip()

        if User.query.filter_by(email=email).first():
            return None, "Email already exists"

        user.set_password(data["password"])
        user.save()

        return user.to_dict(), None

    @staticmethod
    def refresh_token(user_id: int) -> Tuple[Optional[dict], Optional[str]]:
        """Generate new access token."""
        user = db.session.get(User, user_id)
        if not user or not user.is_active:
            return None, "User not found or inactive"

        return {
            "access_token": create_access_token(identity=str(user.id), additional_claims={"role": user.role.value}),
            "user": user.to_dict()
        }, None
