"""Attendance API - live geo-verified check-in and teacher corrections."""
from flask import Blueprint, current_app, g, request
from sqlalchemy.exc import SQLAlchemyError
from edutrack import db, limiter
from edutrack.services import attendance_recorder
from edutrack.services.exceptions import GeolocationUnavailable
from edutrack.utils.dates import parse_date
from edutrack.utils.decorators import student_required, teacher_required
from edutrack.utils.helpers import success_response, error_response

attendance_bp = Blueprint('attendance', __name__)

@attendance_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Attendance service is running')

@attendance_bp.route('/mark', methods=['POST'])
@student_required
@limiter.limit("20 per minute")
def mark_attendance():
    """Mark today's attendance with a session code and the device location."""
    data = request.get_json(silent=True) or {}

    session_code = data.get('session_code') or data.get('sessionCode')
    if not session_code:
        return error_response('Session code is required', 400)

    if data.get('latitude') is None or data.get('longitude') is None:
        raise GeolocationUnavailable('Location is required to mark attendance')

    recorder = attendance_recorder()
    try:
        record = recorder.mark_attendance(
            g.current_user.id,
            session_code,
            data['latitude'],
            data['longitude']
        )
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception('Mark attendance failed')
        return error_response('Internal server error', 500)

    return success_response(
        data={
            'attendance': record.to_dict(),
            'session': {
                'subject': record.session.subject,
                'date': record.session.session_date.isoformat()
            },
            'distance': round(record.distance_meters)
        },
        message='Attendance marked successfully'
    )

@attendance_bp.route('/me', methods=['GET'])
@student_required
def my_attendance():
    """Own attendance records with totals and percentage."""
    return success_response(data=attendance_recorder().summary(g.current_user.id))

@attendance_bp.route('/manual', methods=['POST'])
@teacher_required
def manual_mark():
    """Teacher correction: set a student's status for a day without a location check."""
    data = request.get_json(silent=True) or {}

    student_id = data.get('student_id')
    status = data.get('status')
    if not student_id or not data.get('date') or not status:
        return error_response('Missing required fields', 400)

    try:
        day = parse_date(str(data['date']))
    except ValueError:
        return error_response('Invalid date format. Use YYYY-MM-DD', 400)

    try:
        record, created = attendance_recorder().mark_manual(g.current_user.id, student_id, day, status)
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception('Manual attendance mark failed')
        return error_response('Internal server error', 500)

    if created:
        return success_response(data=record.to_dict(), message='Attendance marked', status_code=201)
    return success_response(data=record.to_dict(), message='Attendance updated')
