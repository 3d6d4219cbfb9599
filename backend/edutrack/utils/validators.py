"""Validation utilities for account data."""
import re
from typing import Dict, List, Any

from edutrack.models.user import DEPARTMENTS, STUDY_YEARS, UserRole

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

def _result(errors: List[str]) -> Dict[str, Any]:
    return {"is_valid": not errors, "errors": errors}

class Validator:
    """Validation helper class. Checks return ``{"is_valid", "errors"}``."""

    @staticmethod
    def validate_email(email: str) -> bool:
        return isinstance(email, str) and bool(EMAIL_PATTERN.match(email))

    @staticmethod
    def validate_password(password: str) -> Dict[str, Any]:
        if not password or not isinstance(password, str):
            return _result(["Password is required"])
        if len(password) < 6:
            return _result(["Password must be at least 6 characters long"])
        if len(password) > 128:
            return _result(["Password is too long"])
        return _result([])

    @staticmethod
    def validate_name(name: str) -> Dict[str, Any]:
        name = name.strip() if isinstance(name, str) else ""
        if not name:
            return _result(["Name is required"])
        if len(name) < 2:
            return _result(["Name must be at least 2 characters long"])
        if len(name) > 100:
            return _result(["Name is too long"])
        return _result([])

    @staticmethod
    def validate_placement(role: UserRole, data: Dict) -> Dict[str, Any]:
        """Department for everyone, a study year for students, taught years and a subject for teachers."""
        errors = []

        if data.get("department") not in DEPARTMENTS:
            errors.append("Invalid department")

        if role == UserRole.STUDENT:
            if data.get("year") not in STUDY_YEARS:
                errors.append("Year must be between 1 and 4")
        elif role == UserRole.TEACHER:
            years_taught = data.get("years_taught")
            if not isinstance(years_taught, list) or not years_taught or \
                    any(year not in STUDY_YEARS for year in years_taught):
                errors.append("Years taught must be a list of years between 1 and 4")
            if not Validator.is_text(data.get("subject")):
                errors.append("Subject is required for teachers")

        return _result(errors)

    @staticmethod
    def is_id(value) -> bool:
        """Positive integer primary key; booleans do not count."""
        return isinstance(value, int) and not isinstance(value, bool) and value > 0

    @staticmethod
    def is_text(value) -> bool:
        return isinstance(value, str) and bool(value.strip())

    @staticmethod
    def validate_required_fields(data: Dict, required_fields: List[str]) -> Dict[str, Any]:
        return _result([
            f"{field.replace('_', ' ').capitalize()} is required"
            for field in required_fields
            if data.get(field) in (None, "")
        ])
