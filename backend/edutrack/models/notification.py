"""In-app notifications."""
from enum import Enum
from edutrack import db
from edutrack.models.base import BaseModel

class NotificationType(Enum):
    MARKS_PUBLISHED = 'MARKS_PUBLISHED'
    ATTENDANCE_WARNING = 'ATTENDANCE_WARNING'
    ALERT = 'ALERT'
    PROGRESS_REPORT = 'PROGRESS_REPORT'

class Notification(BaseModel):
    """Message shown to a single user."""

    __tablename__ = 'notifications'
    __table_args__ = (
        db.Index('ix_notifications_user_created', 'user_id', 'created_at'),
    )

    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type = db.Column(db.Enum(NotificationType), nullable=False, default=NotificationType.ALERT)
    is_read = db.Column(db.Boolean, default=False, nullable=False)
    link = db.Column(db.String(255), nullable=True)
    report_id = db.Column(db.Integer, db.ForeignKey('progress_reports.id'), nullable=True)

    def __repr__(self):
        return f'<Notification {self.user_id} {self.type.value}>'
