"""Attendance session registry."""
import logging
import secrets
import string
from collections import OrderedDict
from datetime import date
from typing import Callable, Dict, List, Optional

from edutrack.models.attendance_session import AttendanceSession
from edutrack.models.user import User
from edutrack.services.exceptions import SessionAlreadyActive, SessionNotFound, ValidationError
from edutrack.services.geo_service import GeoVerifier
from edutrack.services.qr_service import QRService
from edutrack.utils.dates import DEFAULT_TIMEZONE, local_date, naive_utc, utc_now

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_SUFFIX_LENGTH = 4


def normalize_session_code(code) -> str:
    """Session codes are case-insensitive; stored and compared in upper case."""
    if not isinstance(code, str) or not code.strip():
        raise SessionNotFound()
    return code.strip().upper()


class SessionRegistry:
    """Creates, looks up and closes attendance sessions.

    Sessions are append-only history: they can be closed but never deleted.
    """

    def __init__(self, session, tz_name: str = DEFAULT_TIMEZONE,
                 clock: Callable = utc_now, history_limit: int = 100):
        self.session = session
        self.tz_name = tz_name
        self.clock = clock
        self.history_limit = history_limit

    @staticmethod
    def generate_session_code(day: date) -> str:
        """``DDMMYY-XXXX`` with a random alphanumeric suffix."""
        suffix = ''.join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_SUFFIX_LENGTH))
        return f"{day:%d%m%y}-{suffix}"

    def today(self) -> date:
        return local_date(self.clock(), self.tz_name)

    def _unique_code(self, day: date) -> str:
        code = self.generate_session_code(day)
        while self.session.query(AttendanceSession.id).filter_by(session_code=code).first():
            code = self.generate_session_code(day)
        return code

    def create_session(self, teacher_id: int, subject: Optional[str],
                       anchor_lat: float, anchor_lng: float) -> AttendanceSession:
        """Open a new session anchored at the teacher's location."""
        if subject is not None and not isinstance(subject, str):
            raise ValidationError('Subject must be text')
        anchor_lat, anchor_lng = GeoVerifier.validate_coordinates(anchor_lat, anchor_lng)

        teacher = self.session.get(User, teacher_id)
        if not teacher or not teacher.is_teacher():
            raise ValidationError('Only teachers can start attendance sessions')

        today = self.today()
        self._close_stale_sessions(teacher_id, today)

        existing = self.session.query(AttendanceSession).filter_by(
            teacher_id=teacher_id,
            is_active=True,
            session_date=today
        ).first()
        if existing:
            raise SessionAlreadyActive(session_code=existing.session_code)

        attendance_session = AttendanceSession(
            session_code=self._unique_code(today),
            subject=(subject or teacher.subject or '').strip() or None,
            teacher_id=teacher_id,
            anchor_latitude=anchor_lat,
            anchor_longitude=anchor_lng,
            session_date=today,
            start_time=naive_utc(self.clock()),
            is_active=True
        )
        self.session.add(attendance_session)
        self.session.commit()

        logger.info('Attendance session %s opened by teacher %s', attendance_session.session_code, teacher_id)
        return attendance_session

    def get_session(self, session_id: int) -> AttendanceSession:
        attendance_session = self.session.get(AttendanceSession, session_id)
        if not attendance_session:
            raise SessionNotFound()
        return attendance_session

    def close_session(self, session_id: int) -> AttendanceSession:
        """Close a session. Closing an already closed session changes nothing."""
        attendance_session = self.get_session(session_id)

        if not attendance_session.is_active:
            return attendance_session

        attendance_session.is_active = False
        attendance_session.end_time = naive_utc(self.clock())
        self.session.commit()
        return attendance_session

    def get_by_code(self, code) -> Optional[AttendanceSession]:
        """Active session for ``code``, or None."""
        return self.session.query(AttendanceSession).filter_by(
            session_code=normalize_session_code(code),
            is_active=True
        ).first()

    def get_active_session(self, teacher_id: int) -> Optional[AttendanceSession]:
        """The teacher's active session for today."""
        today = self.today()
        self._close_stale_sessions(teacher_id, today)

        return self.session.query(AttendanceSession).filter_by(
            teacher_id=teacher_id,
            is_active=True,
            session_date=today
        ).first()

    def history(self, teacher_id: int, limit: int = None) -> Dict[str, List[dict]]:
        """Teacher's sessions, newest first, grouped by ISO date."""
        sessions = self.session.query(AttendanceSession).filter_by(
            teacher_id=teacher_id
        ).order_by(
            AttendanceSession.session_date.desc(),
            AttendanceSession.start_time.desc()
        ).limit(self._clamp_limit(limit)).all()

        grouped = OrderedDict()
        for attendance_session in sessions:
            key = attendance_session.session_date.isoformat()
            grouped.setdefault(key, []).append(attendance_session.to_dict(include_attendees=True))
        return grouped

    def _clamp_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.history_limit
        return max(1, min(limit, self.history_limit))

    @staticmethod
    def qr_image(attendance_session: AttendanceSession) -> str:
        return QRService.generate_qr_image(attendance_session.session_code)

    def _close_stale_sessions(self, teacher_id: int, today: date) -> int:
        stale = self.session.query(AttendanceSession).filter(
            AttendanceSession.teacher_id == teacher_id,
            AttendanceSession.is_active.is_(True),
            AttendanceSession.session_date < today
        ).all()

        now = naive_utc(self.clock())
        for attendance_session in stale:
            attendance_session.is_active = False
            attendance_session.end_time = now
            logger.info('Auto-closed stale session %s', attendance_session.session_code)

        if stale:
            self.session.commit()
        return len(stale)
