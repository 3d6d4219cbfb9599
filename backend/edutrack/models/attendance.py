"""Daily attendance record."""
from enum import Enum
from edutrack import db
from edutrack.models.base import BaseModel

class AttendanceStatus(Enum):
    PRESENT = 'present'
    ABSENT = 'absent'
    LATE = 'late'

class AttendanceRecord(BaseModel):
    """One attendance fact for a student on one calendar day."""

    __tablename__ = 'attendance_records'
    __table_args__ = (
        db.UniqueConstraint('student_id', 'date', name='uq_attendance_student_date'),
    )

    student_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    status = db.Column(db.Enum(AttendanceStatus), nullable=False, default=AttendanceStatus.PRESENT)
    marked_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    # Live check-in details; empty for manual corrections
    session_id = db.Column(db.Integer, db.ForeignKey('attendance_sessions.id'), nullable=True)
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)
    distance_meters = db.Column(db.Float, nullable=True)

    marker = db.relationship('User', foreign_keys=[marked_by])

    @property
    def attended(self) -> bool:
        return self.status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE)

    def __repr__(self):
        return f'<AttendanceRecord {self.student_id}@{self.date}>'
