"""Service layer.

Services receive the database session (and any settings they need) through
their constructors. The factories below are the single place where request
handlers wire them to ``db.session`` and the app configuration.
"""
from flask import current_app

from edutrack import db
from edutrack.services.attendance_service import AttendanceRecorder
from edutrack.services.geo_service import GeoVerifier
from edutrack.services.notification_service import NotificationService
from edutrack.services.performance_service import PerformanceService
from edutrack.services.report_service import ReportService
from edutrack.services.risk_service import RiskService
from edutrack.services.session_service import SessionRegistry


def session_registry() -> SessionRegistry:
    return SessionRegistry(
        db.session,
        tz_name=current_app.config['ATTENDANCE_TIMEZONE'],
        history_limit=current_app.config['SESSION_HISTORY_LIMIT']
    )


def attendance_recorder() -> AttendanceRecorder:
    return AttendanceRecorder(
        db.session,
        registry=session_registry(),
        geo=GeoVerifier(current_app.config['ATTENDANCE_RADIUS_METERS']),
        tz_name=current_app.config['ATTENDANCE_TIMEZONE']
    )


def performance_service() -> PerformanceService:
    return PerformanceService(db.session)


def risk_service() -> RiskService:
    return RiskService(db.session)


def report_service() -> ReportService:
    return ReportService(db.session)


def notification_service() -> NotificationService:
    return NotificationService(db.session)
