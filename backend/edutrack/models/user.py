"""User model for authentication and authorization."""
from enum import Enum
from werkzeug.security import generate_password_hash, check_password_hash
from edutrack import db
from edutrack.models.base import BaseModel

DEPARTMENTS = (
    'Mechanical',
    'Electrical',
    'Production & Industrial',
    'Metallurgy',
    'Chemical',
    'Civil',
    'Electronics and Communication',
    'Mining',
    'Computer Science & Engineering',
    'Computer Science & Engineering (Cyber Security)',
    'Information Technology',
)

STUDY_YEARS = (1, 2, 3, 4)

class UserRole(Enum):
    """User roles enumeration."""
    STUDENT = 'student'
    TEACHER = 'teacher'
    ADMIN = 'admin'

class User(BaseModel):
    """User model for students, teachers and administrators."""

    __tablename__ = 'users'

    # Basic Information
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    role = db.Column(db.Enum(UserRole), nullable=False, default=UserRole.STUDENT)

    # Academic placement
    department = db.Column(db.String(100), nullable=False)
    year = db.Column(db.Integer, nullable=True)             # students: 1-4
    years_taught = db.Column(db.JSON, nullable=True)        # teachers: [1-4]
    subject = db.Column(db.String(120), nullable=True)      # teachers

    # Account state
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)

    # Relationships
    attendance_records = db.relationship(
        'AttendanceRecord',
        foreign_keys='AttendanceRecord.student_id',
        backref='student',
        lazy='dynamic'
    )
    performance_records = db.relationship('PerformanceRecord', backref='student', lazy='dynamic')

    def set_password(self, password: str) -> None:
        """Set user password with hashing."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Check if provided password matches user's password."""
        return check_password_hash(self.password_hash, password)

    def is_teacher(self) -> bool:
        return self.role == UserRole.TEACHER

    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def teaches(self, subject_name: str) -> bool:
        """Case-insensitive check against the teacher's assigned subject."""
        if not self.subject or not isinstance(subject_name, str):
            return False
        return self.subject.strip().lower() == subject_name.strip().lower()

    def to_dict(self, exclude: list = None) -> dict:
        """Convert to dictionary excluding sensitive data."""
        default_exclude = ['password_hash']
        exclude = (exclude or []) + default_exclude
        return super().to_dict(exclude=exclude)

    def __repr__(self) -> str:
        return f'<User {self.email}>'
