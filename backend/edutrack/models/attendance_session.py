"""Teacher-opened attendance window anchored to a location."""
from edutrack import db
from edutrack.models.base import BaseModel

class AttendanceSession(BaseModel):
    """Live check-in window identified by a ``DDMMYY-XXXX`` code."""

    __tablename__ = 'attendance_sessions'
    __table_args__ = (
        db.Index('ix_attendance_sessions_teacher_active', 'teacher_id', 'is_active'),
    )

    session_code = db.Column(db.String(16), unique=True, nullable=False, index=True)
    subject = db.Column(db.String(120), nullable=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    # Anchor point
    anchor_latitude = db.Column(db.Float, nullable=False)
    anchor_longitude = db.Column(db.Float, nullable=False)

    session_date = db.Column(db.Date, nullable=False)
    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Relationships
    teacher = db.relationship('User', foreign_keys=[teacher_id])
    records = db.relationship('AttendanceRecord', backref='session', lazy='dynamic')

    @property
    def anchor(self):
        return self.anchor_latitude, self.anchor_longitude

    def attendees(self):
        """Students who checked in through this session and still count as attended."""
        from edutrack.models.attendance import AttendanceRecord
        records = self.records.order_by(AttendanceRecord.created_at)
        return [record.student for record in records if record.attended]

    def to_dict(self, include_attendees: bool = False):
        data = super().to_dict()
        data['location'] = {
            'latitude': self.anchor_latitude,
            'longitude': self.anchor_longitude
        }
        if include_attendees:
            students = self.attendees()
            data['attended_students'] = [
                {
                    'id': student.id,
                    'name': student.name,
                    'email': student.email,
                    'department': student.department,
                    'year': student.year
                }
                for student in students
            ]
            data['attended_count'] = len(students)
        return data

    def __repr__(self):
        return f'<AttendanceSession {self.session_code}>'
