"""Progress report composition and generation tests."""
import pytest
from edutrack import db
from edutrack.models.notification import Notification, NotificationType
from edutrack.models.performance import PerformanceRecord
from edutrack.models.report import ProgressReport
from edutrack.services.exceptions import StudentNotFound, ValidationError
from edutrack.services.report_service import (
    MAINTENANCE_PLAN, ReportService, compose, seven_day_plan
)
from edutrack.services.risk_service import RiskLevel

from conftest import auth_headers

def test_compose_strong_student():
    report = compose('Asha Kumar', 95, 85, [], RiskLevel.LOW)

    assert report.narrative_text.startswith('**Personalized Learning Analysis for Asha Kumar**')
    assert '**Excellent Attendance**: Your attendance of 95%' in report.narrative_text
    assert '**Strong Performance**' in report.narrative_text
    assert '**All Skills Strong**' in report.narrative_text
    assert report.seven_day_plan == list(MAINTENANCE_PLAN)
    assert report.risk_level == RiskLevel.LOW

@pytest.mark.parametrize('attendance, heading', [
    (90, 'Excellent Attendance'),
    (75, 'Good Attendance'),
    (74, 'Attendance Concern'),
])
def test_attendance_buckets(attendance, heading):
    assert heading in compose('A', attendance, 70, [], 'low').narrative_text

@pytest.mark.parametrize('score, heading', [
    (80, 'Strong Performance'),
    (65, 'Moderate Performance'),
    (64, 'Performance Needs Improvement'),
])
def test_score_buckets(score, heading):
    assert heading in compose('A', 95, score, [], 'low').narrative_text

def test_weak_skills_listed_verbatim():
    report = compose('Ravi', 70, 55, ['Data Structures (40%)', 'Compilers (52%)'], 'medium')

    assert '- Data Structures (40%)' in report.narrative_text
    assert '- Compilers (52%)' in report.narrative_text
    assert report.seven_day_plan[0] == 'Day 1 (Monday): Focus on Data Structures (40%) - watch tutorials and take notes'
    assert 'Compilers (52%)' in report.seven_day_plan[2]

def test_single_weak_skill_uses_placeholder_second():
    plan = seven_day_plan(['Networks'], RiskLevel.LOW)
    assert plan[2].startswith('Day 3 (Wednesday): Second priority skill')
    assert len(plan) == 7

@pytest.mark.parametrize('level, extra', [
    (RiskLevel.LOW, 0),
    (RiskLevel.MEDIUM, 1),
    (RiskLevel.HIGH, 2),
])
def test_risk_extras(level, extra):
    assert len(seven_day_plan([], level)) == 7 + extra

class TestReportService:

    def test_generate_persists_and_notifies(self, app, teacher, student):
        db.session.add(PerformanceRecord(student_id=student.id, subject_name='Data Structures',
                                         mid_sem_1=4, mid_sem_2=5, end_sem=30, assignment=5))
        db.session.commit()

        report = ReportService(db.session).generate(teacher.id, student.id)

        assert report.id is not None
        assert report.generated_by == teacher.id
        assert report.risk_level == 'high'
        assert '- Data Structures (44%)' in report.report_text
        assert len(report.recommended_plan) == 9

        notification = Notification.query.filter_by(user_id=student.id).one()
        assert notification.type == NotificationType.PROGRESS_REPORT
        assert notification.report_id == report.id

    def test_generate_for_unknown_student(self, app, teacher):
        with pytest.raises(StudentNotFound):
            ReportService(db.session).generate(teacher.id, 999)

    def test_generate_rejects_non_integer_id(self, app, teacher, student):
        for student_id in ([student.id], {'id': student.id}, str(student.id), True):
            with pytest.raises(ValidationError):
                ReportService(db.session).generate(teacher.id, student_id)

        assert ProgressReport.query.count() == 0

def test_report_endpoints(client, teacher_headers, student):
    response = client.post('/api/reports/generate', headers=teacher_headers, json={'student_id': student.id})
    assert response.status_code == 201
    assert response.get_json()['data']['student_id'] == student.id

    response = client.get('/api/reports/me', headers=auth_headers(student))
    assert response.status_code == 200
    assert len(response.get_json()['data']['reports']) == 1
    assert ProgressReport.query.count() == 1

    response = client.post('/api/reports/generate', headers=teacher_headers, json={})
    assert response.status_code == 400

    response = client.post('/api/reports/generate', headers=teacher_headers, json={'student_id': [student.id]})
    assert response.status_code == 400
    assert response.get_json()['code'] == 'VALIDATION_ERROR'
