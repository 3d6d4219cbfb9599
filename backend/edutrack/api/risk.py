"""Risk API - roster and at-risk students for a teacher."""
from flask import Blueprint, g, request
from edutrack.services import risk_service
from edutrack.utils.decorators import teacher_required
from edutrack.utils.helpers import success_response

risk_bp = Blueprint('risk', __name__)

@risk_bp.route('/alerts', methods=['GET'])
@teacher_required
def risk_alerts():
    """Medium and high risk students in the teacher's classes."""
    alerts = risk_service().risk_alerts(g.current_user)

    return success_response(data={
        'alerts': alerts,
        'total': len(alerts),
        'high_risk': sum(1 for alert in alerts if alert['risk_level'] == 'high'),
        'medium_risk': sum(1 for alert in alerts if alert['risk_level'] == 'medium')
    })

@risk_bp.route('/students', methods=['GET'])
@teacher_required
def student_roster():
    """Teacher's students with standings. Supports ?search, ?risk_level and ?sort_by."""
    students = risk_service().roster(
        g.current_user,
        search=request.args.get('search'),
        risk_level=request.args.get('risk_level') or None,
        sort_by=request.args.get('sort_by') or 'name'
    )
    return success_response(data={'students': students, 'total': len(students)})

@risk_bp.route('/students/<int:student_id>', methods=['GET'])
@teacher_required
def student_risk(student_id):
    return success_response(data=risk_service().assess(student_id))
