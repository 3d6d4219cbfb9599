"""Attendance session API - teachers open, close and review check-in windows."""
from flask import Blueprint, current_app, g, request
from sqlalchemy.exc import SQLAlchemyError
from edutrack import db, limiter
from edutrack.services import session_registry
from edutrack.utils.decorators import teacher_required
from edutrack.utils.export import csv_response
from edutrack.utils.helpers import success_response, error_response

sessions_bp = Blueprint('sessions', __name__)

HISTORY_EXPORT_COLUMNS = (
    'date', 'session_code', 'subject', 'start_time', 'end_time',
    'student_name', 'student_email', 'department', 'year'
)

@sessions_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Session service is running')

@sessions_bp.route('/', methods=['POST'])
@teacher_required
@limiter.limit("30 per hour")
def start_session():
    """Open an attendance session anchored at the teacher's location."""
    data = request.get_json(silent=True) or {}
    registry = session_registry()

    try:
        attendance_session = registry.create_session(
            g.current_user.id,
            data.get('subject'),
            data.get('latitude'),
            data.get('longitude')
        )
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception('Start attendance session failed')
        return error_response('Internal server error', 500)

    return success_response(
        data={
            'session': attendance_session.to_dict(include_attendees=True),
            'qr_code': registry.qr_image(attendance_session)
        },
        message='Attendance session started',
        status_code=201
    )

@sessions_bp.route('/active', methods=['GET'])
@teacher_required
def active_session():
    """Today's active session, if any."""
    registry = session_registry()
    attendance_session = registry.get_active_session(g.current_user.id)

    if not attendance_session:
        return success_response(message='No active session today')

    return success_response(data={
        'session': attendance_session.to_dict(include_attendees=True),
        'qr_code': registry.qr_image(attendance_session)
    })

@sessions_bp.route('/<int:session_id>/close', methods=['PATCH'])
@teacher_required
def close_session(session_id):
    """End a session. Closing twice is not an error."""
    registry = session_registry()
    attendance_session = registry.get_session(session_id)

    if attendance_session.teacher_id != g.current_user.id:
        return error_response('You can only close your own sessions', 403)

    try:
        attendance_session = registry.close_session(session_id)
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception('Close attendance session failed')
        return error_response('Internal server error', 500)

    session_data = attendance_session.to_dict(include_attendees=True)
    return success_response(
        data={
            'session': session_data,
            'attended_count': session_data['attended_count']
        },
        message='Session ended successfully'
    )

@sessions_bp.route('/history', methods=['GET'])
@teacher_required
def session_history():
    """All of the teacher's sessions grouped by date."""
    limit = request.args.get('limit', type=int)
    sessions_by_date = session_registry().history(g.current_user.id, limit=limit)
    return success_response(data={'sessions_by_date': sessions_by_date})

@sessions_bp.route('/history/export', methods=['GET'])
@teacher_required
def export_history():
    """Session history as CSV, one row per attendee."""
    sessions_by_date = session_registry().history(g.current_user.id)

    rows = []
    for day, sessions in sessions_by_date.items():
        for attendance_session in sessions:
            for student in attendance_session['attended_students']:
                rows.append({
                    'date': day,
                    'session_code': attendance_session['session_code'],
                    'subject': attendance_session['subject'],
                    'start_time': attendance_session['start_time'],
                    'end_time': attendance_session['end_time'],
                    'student_name': student['name'],
                    'student_email': student['email'],
                    'department': student['department'],
                    'year': student['year']
                })

    return csv_response(rows, HISTORY_EXPORT_COLUMNS, 'attendance_history.csv')
