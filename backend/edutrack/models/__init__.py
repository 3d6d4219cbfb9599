"""Models package with all models."""
from .base import BaseModel
from .user import User, UserRole, DEPARTMENTS, STUDY_YEARS
from .attendance_session import AttendanceSession
from .attendance import AttendanceRecord, AttendanceStatus
from .performance import PerformanceRecord, MARK_LIMITS, MARK_LABELS
from .report import ProgressReport
from .notification import Notification, NotificationType

__all__ = [
    'BaseModel', 'User', 'UserRole', 'DEPARTMENTS', 'STUDY_YEARS',
    'AttendanceSession', 'AttendanceRecord', 'AttendanceStatus',
    'PerformanceRecord', 'MARK_LIMITS', 'MARK_LABELS',
    'ProgressReport', 'Notification', 'NotificationType'
]
