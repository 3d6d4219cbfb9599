"""Marks API - publishing, engagement and statistics."""
from flask import Blueprint, current_app, g, request
from sqlalchemy.exc import SQLAlchemyError
from edutrack import db
from edutrack.models.performance import MARK_LIMITS
from edutrack.services import performance_service
from edutrack.services.performance_service import calculate_grade
from edutrack.utils.decorators import student_required, teacher_required
from edutrack.utils.export import csv_response
from edutrack.utils.helpers import success_response, error_response

performance_bp = Blueprint('performance', __name__)

EXPORT_COLUMNS = ('student_id', 'student_name', 'subject_name', *MARK_LIMITS, 'engagement_score', 'total', 'grade')

def _subject_arg():
    return request.args.get('subject') or g.current_user.subject

@performance_bp.route('/publish', methods=['POST'])
@teacher_required
def publish_marks():
    """Publish one mark component for several students.

    Body: ``{"subject_name", "field", "marks": [{"student_id", "value"}]}``.
    Fields that already hold a value are left untouched and reported as skipped.
    """
    data = request.get_json(silent=True) or {}

    try:
        result = performance_service().publish(
            g.current_user.id,
            data.get('subject_name'),
            data.get('field'),
            data.get('marks')
        )
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception('Publish marks failed')
        return error_response('Internal server error', 500)

    return success_response(data=result.to_dict(), message='Marks published successfully')

@performance_bp.route('/engagement', methods=['PATCH'])
@teacher_required
def update_engagement():
    data = request.get_json(silent=True) or {}

    try:
        record = performance_service().update_engagement(
            g.current_user.id,
            data.get('student_id'),
            data.get('subject_name'),
            data.get('engagement_score')
        )
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception('Engagement update failed')
        return error_response('Internal server error', 500)

    return success_response(data=record.to_dict(), message='Engagement updated')

@performance_bp.route('/', methods=['GET'])
@teacher_required
def subject_records():
    """Performance records for the teacher's subject."""
    records = performance_service().records_for_subject(g.current_user.id, _subject_arg())
    return success_response(data={'performance_records': [record.to_dict() for record in records]})

@performance_bp.route('/statistics', methods=['GET'])
@teacher_required
def subject_statistics():
    """Class statistics and grade distribution for the teacher's subject."""
    return success_response(data=performance_service().subject_statistics(g.current_user.id, _subject_arg()))

@performance_bp.route('/export', methods=['GET'])
@teacher_required
def export_marks():
    records = performance_service().records_for_subject(g.current_user.id, _subject_arg())

    rows = []
    for record in records:
        row = record.to_dict()
        row['student_name'] = record.student.name
        row['grade'] = calculate_grade(record.percentage)['grade']
        rows.append(row)

    return csv_response(rows, EXPORT_COLUMNS, 'marks_export.csv')

@performance_bp.route('/me', methods=['GET'])
@student_required
def my_performance():
    """Own marks per subject with grades."""
    records = performance_service().records_for_student(g.current_user.id)

    results = []
    for record in records:
        row = record.to_dict()
        row['grade'] = calculate_grade(record.percentage)
        results.append(row)

    return success_response(data={'performance_records': results})
