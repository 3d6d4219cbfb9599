"""Shared fixtures."""
from datetime import datetime, timezone

import pytest
from edutrack import create_app, db
from edutrack.models.user import User, UserRole
from edutrack.services.auth_service import issue_tokens

DEPARTMENT = 'Computer Science & Engineering'

# Campus anchor used across the attendance tests
ANCHOR = (12.9716, 77.5946)

# 20:00 UTC is already the next calendar day in India
FIXED_NOW = datetime(2026, 5, 19, 20, 0, tzinfo=timezone.utc)

@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

@pytest.fixture
def clock():
    return lambda: FIXED_NOW

def make_user(email, name, role=UserRole.STUDENT, **fields):
    user = User(
        email=email,
        name=name,
        role=role,
        department=fields.pop('department', DEPARTMENT),
        **fields
    )
    user.set_password('password123')
    return user.save()

@pytest.fixture
def teacher(app):
    return make_user(
        'teacher@example.com', 'Dr. Meera Rao', UserRole.TEACHER,
        years_taught=[2], subject='Data Structures'
    )

@pytest.fixture
def other_teacher(app):
    return make_user(
        'other.teacher@example.com', 'Dr. Arjun Nair', UserRole.TEACHER,
        years_taught=[2], subject='Operating Systems'
    )

@pytest.fixture
def student(app):
    return make_user('student@example.com', 'Asha Kumar', year=2)

@pytest.fixture
def second_student(app):
    return make_user('second@example.com', 'Ravi Shah', year=2)

def auth_headers(user):
    return {'Authorization': f"Bearer {issue_tokens(user)['access_token']}"}

@pytest.fixture
def teacher_headers(teacher):
    return auth_headers(teacher)

@pytest.fixture
def student_headers(student):
    return auth_headers(student)

class _MissingRow:
    """Query stand-in whose lookup finds nothing."""

    def filter_by(self, **kwargs):
        return self

    def first(self):
        return None

class RacingSession:
    """Wraps a session so a competing writer commits right before the first
    lookup of ``target``, and that lookup still sees no row.
    """

    def __init__(self, session, target, compete):
        self._session = session
        self._target = target
        self._compete = compete
        self.raced = False

    def query(self, *entities, **kwargs):
        if not self.raced and entities and entities[0] is self._target:
            self.raced = True
            self._compete()
            return _MissingRow()
        return self._session.query(*entities, **kwargs)

    def __getattr__(self, name):
        return getattr(self._session, name)
