"""Risk classification tests."""
from datetime import date, timedelta

import pytest
from edutrack import db
from edutrack.models.attendance import AttendanceRecord, AttendanceStatus
from edutrack.models.performance import PerformanceRecord
from edutrack.services.exceptions import StudentNotFound, ValidationError
from edutrack.services.risk_service import (
    RiskLevel, RiskService, StudentStanding, classify, clamp_percent, recommendations
)

from conftest import auth_headers, make_user

@pytest.mark.parametrize('attendance, score, expected', [
    (59, 90, RiskLevel.HIGH),
    (90, 49, RiskLevel.HIGH),
    (60, 90, RiskLevel.MEDIUM),
    (75, 90, RiskLevel.MEDIUM),
    (90, 50, RiskLevel.MEDIUM),
    (90, 65, RiskLevel.MEDIUM),
    (76, 66, RiskLevel.LOW),
    (100, 100, RiskLevel.LOW),
    # high wins over medium
    (70, 40, RiskLevel.HIGH),
    (70, 55, RiskLevel.MEDIUM),
    (95, 95, RiskLevel.LOW),
])
def test_classify_thresholds(attendance, score, expected):
    assert classify(attendance, score) == expected

def test_clamp_percent():
    assert clamp_percent(-5) == 0
    assert clamp_percent(140) == 100
    assert clamp_percent(None) == 0
    assert clamp_percent(42) == 42

def test_high_risk_recommendations():
    standing = StudentStanding(student_id=1, attendance_percent=50, average_score=40, engagement_score=30)
    advice = recommendations(RiskLevel.HIGH, standing)

    assert 'Improve attendance to maintain consistent learning' in advice
    assert 'Consider one-on-one tutoring sessions' in advice

def test_low_risk_has_no_escalation():
    standing = StudentStanding(student_id=1, attendance_percent=95, average_score=90, engagement_score=80)
    assert recommendations(RiskLevel.LOW, standing) == []

def add_attendance(student, teacher, present, absent, start=date(2026, 4, 1)):
    day = start
    for status in [AttendanceStatus.PRESENT] * present + [AttendanceStatus.ABSENT] * absent:
        db.session.add(AttendanceRecord(student_id=student.id, date=day, status=status, marked_by=teacher.id))
        day += timedelta(days=1)
    db.session.commit()

def add_marks(student, subject, **marks):
    db.session.add(PerformanceRecord(student_id=student.id, subject_name=subject, **marks))
    db.session.commit()

class TestRiskService:

    def test_standing_aggregates_attendance_and_marks(self, app, teacher, student):
        add_attendance(student, teacher, present=3, absent=1)
        add_marks(student, 'Data Structures', mid_sem_1=8, mid_sem_2=7, end_sem=50, assignment=9,
                  engagement_score=70)

        standing = RiskService(db.session).standing(student.id)

        assert standing.attendance_percent == 75
        assert standing.average_score == 74
        assert standing.engagement_score == 70
        assert standing.total_days == 4
        assert standing.subject_scores == [('Data Structures', 74)]
        assert standing.risk_level == RiskLevel.MEDIUM

    def test_student_without_data_is_high_risk(self, app, student):
        standing = RiskService(db.session).standing(student.id)

        assert standing.attendance_percent == 0
        assert standing.risk_level == RiskLevel.HIGH

    def test_assess_unknown_student(self, app, teacher):
        with pytest.raises(StudentNotFound):
            RiskService(db.session).assess(teacher.id)

    def test_alerts_ordered_and_scoped(self, app, teacher, student, second_student):
        add_attendance(student, teacher, present=10, absent=0)
        add_marks(student, 'Data Structures', mid_sem_1=10, mid_sem_2=10, end_sem=60, assignment=10)

        add_attendance(second_student, teacher, present=7, absent=3)
        add_marks(second_student, 'Data Structures', mid_sem_1=7, mid_sem_2=7, end_sem=50, assignment=6)

        weak = make_user('weak@example.com', 'Kiran Das', year=2)
        add_attendance(weak, teacher, present=1, absent=4)

        # Different year, not taught by this teacher
        outsider = make_user('outsider@example.com', 'Neha Jain', year=4)
        add_attendance(outsider, teacher, present=0, absent=5)

        alerts = RiskService(db.session).risk_alerts(teacher)

        assert [alert['student']['email'] for alert in alerts] == ['weak@example.com', 'second@example.com']
        assert alerts[0]['risk_level'] == 'high'
        assert alerts[1]['risk_level'] == 'medium'
        assert 'Low attendance: 20%' in alerts[0]['reasons']

@pytest.fixture
def roster_class(app, teacher, student, second_student):
    add_attendance(student, teacher, present=10, absent=0)
    add_marks(student, 'Data Structures', mid_sem_1=10, mid_sem_2=10, end_sem=60, assignment=10)

    add_attendance(second_student, teacher, present=7, absent=3)
    add_marks(second_student, 'Data Structures', mid_sem_1=7, mid_sem_2=7, end_sem=50, assignment=6)

    weak = make_user('weak@example.com', 'Kiran Das', year=2)
    add_attendance(weak, teacher, present=1, absent=4)

    make_user('outsider@example.com', 'Neha Jain', year=4)

class TestRoster:

    def names(self, rows):
        return [row['student']['name'] for row in rows]

    @pytest.mark.parametrize('sort_by, expected', [
        ('name', ['Asha Kumar', 'Kiran Das', 'Ravi Shah']),
        ('attendance', ['Asha Kumar', 'Ravi Shah', 'Kiran Das']),
        ('score', ['Asha Kumar', 'Ravi Shah', 'Kiran Das']),
        ('risk', ['Kiran Das', 'Ravi Shah', 'Asha Kumar']),
    ])
    def test_sort_orders(self, roster_class, teacher, sort_by, expected):
        rows = RiskService(db.session).roster(teacher, sort_by=sort_by)
        assert self.names(rows) == expected

    def test_rows_carry_standing(self, roster_class, teacher):
        row = RiskService(db.session).roster(teacher)[0]

        assert row['attendance_percent'] == 100
        assert row['average_score'] == 90
        assert row['risk_level'] == 'low'

    def test_search_matches_name_or_email(self, roster_class, teacher):
        service = RiskService(db.session)

        assert self.names(service.roster(teacher, search='KIRAN')) == ['Kiran Das']
        assert self.names(service.roster(teacher, search='second@')) == ['Ravi Shah']
        assert service.roster(teacher, search='Neha') == []

    def test_risk_filter(self, roster_class, teacher):
        rows = RiskService(db.session).roster(teacher, risk_level='medium')
        assert self.names(rows) == ['Ravi Shah']

    def test_invalid_options(self, app, teacher):
        with pytest.raises(ValidationError):
            RiskService(db.session).roster(teacher, risk_level='severe')

        with pytest.raises(ValidationError):
            RiskService(db.session).roster(teacher, sort_by='email')

def test_roster_endpoint(client, roster_class, teacher_headers, student_headers):
    response = client.get('/api/risk/students?sort_by=risk&search=a', headers=teacher_headers)
    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['total'] == 3
    assert data['students'][0]['risk_level'] == 'high'

    response = client.get('/api/risk/students?risk_level=high', headers=teacher_headers)
    assert [row['student']['email'] for row in response.get_json()['data']['students']] == ['weak@example.com']

    response = client.get('/api/risk/students?sort_by=nope', headers=teacher_headers)
    assert response.status_code == 400

    response = client.get('/api/risk/students', headers=student_headers)
    assert response.status_code == 403

def test_risk_endpoints(client, app, teacher, teacher_headers, student):
    add_attendance(student, teacher, present=1, absent=3)

    response = client.get('/api/risk/alerts', headers=teacher_headers)
    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['total'] == 1
    assert data['high_risk'] == 1

    response = client.get(f'/api/risk/students/{student.id}', headers=teacher_headers)
    assert response.status_code == 200
    assert response.get_json()['data']['risk_level'] == 'high'

    response = client.get('/api/risk/alerts', headers=auth_headers(student))
    assert response.status_code == 403
