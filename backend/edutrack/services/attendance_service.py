"""Attendance recording service."""
import logging
from datetime import date
from typing import Callable, Dict, Tuple

from sqlalchemy.exc import IntegrityError

from edutrack.models.attendance import AttendanceRecord, AttendanceStatus
from edutrack.models.notification import NotificationType
from edutrack.models.user import User
from edutrack.services.exceptions import AlreadyMarked, SessionNotFound, StudentNotFound, ValidationError
from edutrack.services.geo_service import GeoVerifier
from edutrack.services.notification_service import NotificationService
from edutrack.services.session_service import SessionRegistry
from edutrack.utils.dates import DEFAULT_TIMEZONE, local_date, utc_now
from edutrack.utils.metrics import calculate_percentage
from edutrack.utils.validators import Validator

logger = logging.getLogger(__name__)

ATTENDANCE_WARNING_PERCENT = 75


class AttendanceRecorder:
    """Writes at most one attendance record per student per calendar day.

    Uniqueness is enforced by the ``(student_id, date)`` constraint in the
    database; a duplicate insert surfaces as AlreadyMarked.
    """

    def __init__(self, session, registry: SessionRegistry = None, geo: GeoVerifier = None,
                 tz_name: str = DEFAULT_TIMEZONE, clock: Callable = utc_now,
                 notifications: NotificationService = None):
        self.session = session
        self.tz_name = tz_name
        self.clock = clock
        self.registry = registry or SessionRegistry(session, tz_name=tz_name, clock=clock)
        self.geo = geo or GeoVerifier()
        self.notifications = notifications or NotificationService(session)

    def today(self) -> date:
        return local_date(self.clock(), self.tz_name)

    def mark_attendance(self, student_id: int, session_code, latitude, longitude) -> AttendanceRecord:
        """Live check-in through an active session."""
        attendance_session = self.registry.get_by_code(session_code)
        if not attendance_session:
            raise SessionNotFound()

        verification = self.geo.require_within(attendance_session.anchor, (latitude, longitude))

        day = self.today()
        record = AttendanceRecord(
            student_id=student_id,
            date=day,
            status=AttendanceStatus.PRESENT,
            marked_by=attendance_session.teacher_id,
            session_id=attendance_session.id,
            latitude=latitude,
            longitude=longitude,
            distance_meters=round(verification.distance, 2)
        )
        self.session.add(record)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise AlreadyMarked(date=day.isoformat())

        logger.info(
            'Student %s marked present via %s (%.2f m)',
            student_id, attendance_session.session_code, verification.distance
        )
        return record

    def mark_manual(self, teacher_id: int, student_id: int, day: date, status: str) -> Tuple[AttendanceRecord, bool]:
        """Teacher correction path: no location check, may overwrite the day's status.

        Returns the record and whether it was newly created.
        """
        if not Validator.is_id(student_id):
            raise ValidationError('Invalid student ID')
        try:
            attendance_status = AttendanceStatus(status)
        except ValueError:
            raise ValidationError('Invalid status', allowed=[s.value for s in AttendanceStatus])

        student = self.session.get(User, student_id)
        if not student or not student.is_student():
            raise StudentNotFound()

        created = True
        record = self.session.query(AttendanceRecord).filter_by(student_id=student_id, date=day).first()
        if record:
            created = False
            record.status = attendance_status
            record.marked_by = teacher_id
        else:
            record = AttendanceRecord(
                student_id=student_id,
                date=day,
                status=attendance_status,
                marked_by=teacher_id
            )
            self.session.add(record)
        try:
            self.session.flush()
        except IntegrityError:
            # Lost a race with a concurrent write for the same day
            self.session.rollback()
            created = False
            record = self.session.query(AttendanceRecord).filter_by(student_id=student_id, date=day).one()
            record.status = attendance_status
            record.marked_by = teacher_id
            self.session.flush()

        if not record.attended:
            self._warn_low_attendance(student_id)
        self.session.commit()

        return record, created

    def _warn_low_attendance(self, student_id: int) -> None:
        percentage = self.summary(student_id)['percentage']
        if percentage >= ATTENDANCE_WARNING_PERCENT:
            return

        logger.info('Attendance warning for student %s at %s%%', student_id, percentage)
        self.notifications.notify(
            student_id,
            'Low Attendance',
            f'Your attendance is {percentage}%, below the required {ATTENDANCE_WARNING_PERCENT}%.',
            type=NotificationType.ATTENDANCE_WARNING,
            link='/student/dashboard'
        )

    def summary(self, student_id: int) -> Dict:
        """Student's records with present/late/absent counts and attendance percentage."""
        records = self.session.query(AttendanceRecord).filter_by(
            student_id=student_id
        ).order_by(AttendanceRecord.date.desc()).all()

        counts = {status: 0 for status in AttendanceStatus}
        for record in records:
            counts[record.status] += 1

        total = len(records)
        attended = counts[AttendanceStatus.PRESENT] + counts[AttendanceStatus.LATE]

        return {
            'attendance': [record.to_dict() for record in records],
            'total': total,
            'present': counts[AttendanceStatus.PRESENT],
            'late': counts[AttendanceStatus.LATE],
            'absent': counts[AttendanceStatus.ABSENT],
            'percentage': calculate_percentage(attended, total)
        }
