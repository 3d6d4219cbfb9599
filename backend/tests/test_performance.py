"""Marks publishing and grading tests."""
import pytest
from edutrack import db
from edutrack.models.notification import Notification
from edutrack.models.performance import PerformanceRecord
from edutrack.services.exceptions import SubjectNotAssigned, ValidationError
from edutrack.services.performance_service import PerformanceService, calculate_grade, class_statistics

from conftest import RacingSession, auth_headers

@pytest.mark.parametrize('percentage, grade, status', [
    (96, 'A+', 'pass'),
    (90, 'A', 'pass'),
    (72, 'C', 'pass'),
    (60, 'D', 'pass'),
    (59.5, 'F', 'fail'),
])
def test_calculate_grade(percentage, grade, status):
    result = calculate_grade(percentage)
    assert result['grade'] == grade
    assert result['status'] == status

def test_calculate_grade_out_of_range():
    assert calculate_grade(120)['grade'] == 'N/A'
    assert calculate_grade(None)['grade'] == 'N/A'

def test_class_statistics():
    stats = class_statistics([95, 72, 40, 61])

    assert stats['total_students'] == 4
    assert stats['average'] == 67
    assert stats['median'] == 66.5
    assert stats['highest'] == 95
    assert stats['lowest'] == 40
    assert stats['pass_count'] == 3
    assert stats['grade_distribution']['F'] == 1

def test_class_statistics_empty():
    assert class_statistics([])['total_students'] == 0

@pytest.fixture
def service(app):
    return PerformanceService(db.session)

class TestPublish:

    def test_publish_creates_records_and_notifies(self, service, teacher, student, second_student):
        result = service.publish(teacher.id, 'data structures', 'mid_sem_1', [
            {'student_id': student.id, 'value': 8},
            {'student_id': second_student.id, 'value': 9.5},
        ])

        assert len(result.published) == 2
        assert result.skipped == []
        assert result.subject_name == 'Data Structures'
        record = PerformanceRecord.query.filter_by(student_id=student.id).one()
        assert record.mid_sem_1 == 8
        assert Notification.query.count() == 2

    def test_published_field_is_locked(self, service, teacher, student):
        service.publish(teacher.id, 'Data Structures', 'end_sem', [{'student_id': student.id, 'value': 60}])

        result = service.publish(teacher.id, 'Data Structures', 'end_sem', [{'student_id': student.id, 'value': 10}])

        assert result.published == []
        assert result.skipped == [{'student_id': student.id, 'reason': 'already_published'}]
        assert PerformanceRecord.query.filter_by(student_id=student.id).one().end_sem == 60

    def test_other_fields_still_open(self, service, teacher, student):
        service.publish(teacher.id, 'Data Structures', 'end_sem', [{'student_id': student.id, 'value': 60}])
        service.publish(teacher.id, 'Data Structures', 'assignment', [{'student_id': student.id, 'value': 7}])

        record = PerformanceRecord.query.filter_by(student_id=student.id).one()
        assert record.total == 67

    def test_invalid_entries_are_skipped(self, service, teacher, student):
        result = service.publish(teacher.id, 'Data Structures', 'mid_sem_2', [
            {'student_id': student.id, 'value': 11},
            {'student_id': student.id, 'value': True},
            {'student_id': teacher.id, 'value': 5},
            {'student_id': 999, 'value': 5},
        ])

        reasons = [item['reason'] for item in result.skipped]
        assert reasons == ['invalid_value', 'invalid_value', 'student_not_found', 'student_not_found']
        assert PerformanceRecord.query.count() == 0

    def test_wrong_subject(self, service, teacher, student):
        with pytest.raises(SubjectNotAssigned):
            service.publish(teacher.id, 'Operating Systems', 'end_sem', [{'student_id': student.id, 'value': 50}])

    def test_unknown_field(self, service, teacher, student):
        with pytest.raises(ValidationError):
            service.publish(teacher.id, 'Data Structures', 'attendance', [{'student_id': student.id, 'value': 5}])

    def test_engagement_can_change(self, service, teacher, student):
        service.update_engagement(teacher.id, student.id, 'Data Structures', 40)
        record = service.update_engagement(teacher.id, student.id, 'Data Structures', 85)

        assert record.engagement_score == 85
        assert PerformanceRecord.query.count() == 1

        with pytest.raises(ValidationError):
            service.update_engagement(teacher.id, student.id, 'Data Structures', 101)

    def test_non_text_subject_and_field(self, service, teacher, student):
        with pytest.raises(ValidationError):
            service.publish(teacher.id, 42, 'end_sem', [{'student_id': student.id, 'value': 50}])

        with pytest.raises(ValidationError):
            service.publish(teacher.id, 'Data Structures', ['end_sem'], [{'student_id': student.id, 'value': 50}])

        with pytest.raises(ValidationError):
            service.update_engagement(teacher.id, student.id, None, 50)

    def test_non_integer_student_ids_are_skipped(self, service, teacher, student):
        result = service.publish(teacher.id, 'Data Structures', 'assignment', [
            {'student_id': [student.id], 'value': 5},
            {'student_id': True, 'value': 5},
            {'student_id': str(student.id), 'value': 5},
        ])

        assert [item['reason'] for item in result.skipped] == ['student_not_found'] * 3
        assert PerformanceRecord.query.count() == 0

    def test_concurrent_publish_of_same_field_keeps_first_value(self, service, teacher, student):
        def compete():
            db.session.add(PerformanceRecord(student_id=student.id, subject_name='Data Structures', end_sem=60))
            db.session.commit()

        service.session = RacingSession(db.session, PerformanceRecord.id, compete)

        result = service.publish(teacher.id, 'Data Structures', 'end_sem', [{'student_id': student.id, 'value': 10}])

        assert service.session.raced
        assert result.published == []
        assert result.skipped == [{'student_id': student.id, 'reason': 'already_published'}]
        assert PerformanceRecord.query.filter_by(student_id=student.id).one().end_sem == 60
        assert Notification.query.count() == 0

    def test_concurrent_record_creation_still_publishes(self, service, teacher, student):
        def compete():
            db.session.add(PerformanceRecord(
                student_id=student.id, subject_name='Data Structures', engagement_score=70
            ))
            db.session.commit()

        service.session = RacingSession(db.session, PerformanceRecord.id, compete)

        result = service.publish(teacher.id, 'Data Structures', 'end_sem', [{'student_id': student.id, 'value': 55}])

        assert service.session.raced
        assert len(result.published) == 1
        record = PerformanceRecord.query.filter_by(student_id=student.id).one()
        assert record.end_sem == 55
        assert record.engagement_score == 70

def test_percentage_rounds_half_up():
    record = PerformanceRecord(student_id=1, subject_name='Data Structures', end_sem=62.5, assignment=10)

    assert record.total == 72.5
    assert record.percentage == 73

def test_performance_endpoints(client, teacher_headers, student, other_teacher):
    response = client.post('/api/performance/publish', headers=teacher_headers, json={
        'subject_name': 'Data Structures',
        'field': 'end_sem',
        'marks': [{'student_id': student.id, 'value': 63}]
    })
    assert response.status_code == 200
    assert response.get_json()['data']['count'] == 1

    response = client.post('/api/performance/publish', headers=auth_headers(other_teacher), json={
        'subject_name': 'Data Structures',
        'field': 'mid_sem_1',
        'marks': [{'student_id': student.id, 'value': 5}]
    })
    assert response.status_code == 403
    assert response.get_json()['code'] == 'SUBJECT_NOT_ASSIGNED'

    response = client.get('/api/performance/statistics', headers=teacher_headers)
    assert response.get_json()['data']['total_students'] == 1

    response = client.get('/api/performance/export', headers=teacher_headers)
    assert response.status_code == 200
    assert 'Asha Kumar' in response.get_data(as_text=True)

    response = client.get('/api/performance/me', headers=auth_headers(student))
    records = response.get_json()['data']['performance_records']
    assert records[0]['end_sem'] == 63
    assert records[0]['grade']['grade'] == 'D'

    response = client.get('/api/notifications/', headers=auth_headers(student))
    data = response.get_json()['data']
    assert data['unread_count'] == 1

    notification_id = data['notifications'][0]['id']
    response = client.patch(f'/api/notifications/{notification_id}/read', headers=auth_headers(student))
    assert response.status_code == 200
    assert response.get_json()['data']['is_read'] is True

    response = client.patch(f'/api/notifications/{notification_id}/read', headers=teacher_headers)
    assert response.status_code == 404

def test_publish_rejects_non_text_subject(client, teacher_headers, student):
    response = client.post('/api/performance/publish', headers=teacher_headers, json={
        'subject_name': 101,
        'field': 'end_sem',
        'marks': [{'student_id': student.id, 'value': 63}]
    })

    assert response.status_code == 400
    assert response.get_json()['code'] == 'VALIDATION_ERROR'
    assert PerformanceRecord.query.count() == 0
