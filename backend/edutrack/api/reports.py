"""Progress report API."""
from flask import Blueprint, current_app, g, request
from sqlalchemy.exc import SQLAlchemyError
from edutrack import db, limiter
from edutrack.services import report_service
from edutrack.utils.decorators import student_required, teacher_required
from edutrack.utils.helpers import success_response, error_response

reports_bp = Blueprint('reports', __name__)

@reports_bp.route('/generate', methods=['POST'])
@teacher_required
@limiter.limit("30 per hour")
def generate_report():
    """Generate a progress report for a student and notify them."""
    data = request.get_json(silent=True) or {}

    student_id = data.get('student_id')
    if not student_id:
        return error_response('Student ID is required', 400)

    try:
        report = report_service().generate(g.current_user.id, student_id)
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception('Report generation failed')
        return error_response('Internal server error', 500)

    return success_response(data=report.to_dict(), message='Report generated successfully', status_code=201)

@reports_bp.route('/me', methods=['GET'])
@student_required
def my_reports():
    reports = report_service().reports_for_student(g.current_user.id)
    return success_response(data={'reports': [report.to_dict() for report in reports]})
