"""Marks publishing and grade statistics."""
import logging
import math
import statistics
from dataclasses import dataclass, field
from numbers import Real
from typing import Dict, List, Optional, Sequence

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from edutrack.models.notification import NotificationType
from edutrack.models.performance import MARK_LABELS, MARK_LIMITS, PerformanceRecord
from edutrack.models.user import User
from edutrack.services.exceptions import StudentNotFound, SubjectNotAssigned, ValidationError
from edutrack.services.notification_service import NotificationService
from edutrack.utils.validators import Validator

logger = logging.getLogger(__name__)

PASS_MARK = 60

# (grade, minimum percentage, grade points), highest first
GRADE_THRESHOLDS = (
    ('A+', 95, 10),
    ('A', 90, 9),
    ('B+', 85, 8),
    ('B', 80, 7),
    ('C+', 75, 6),
    ('C', 70, 5),
    ('D', 60, 4),
    ('F', 0, 0),
)


def calculate_grade(percentage: float) -> Dict:
    """Letter grade, points and pass/fail for a percentage."""
    if percentage is None or not 0 <= percentage <= 100:
        return {'grade': 'N/A', 'percentage': 0, 'points': 0, 'status': 'fail'}

    for grade, minimum, points in GRADE_THRESHOLDS:
        if percentage >= minimum:
            return {
                'grade': grade,
                'percentage': round(percentage, 1),
                'points': points,
                'status': 'pass' if percentage >= PASS_MARK else 'fail'
            }


def class_statistics(percentages: Sequence[float]) -> Dict:
    """Summary statistics and grade distribution for a class."""
    distribution = {grade: 0 for grade, _, _ in GRADE_THRESHOLDS}

    if not percentages:
        return {
            'average': 0,
            'median': 0,
            'highest': 0,
            'lowest': 0,
            'pass_count': 0,
            'fail_count': 0,
            'total_students': 0,
            'grade_distribution': distribution
        }

    pass_count = 0
    for percentage in percentages:
        result = calculate_grade(percentage)
        if result['grade'] in distribution:
            distribution[result['grade']] += 1
        if result['status'] == 'pass':
            pass_count += 1

    return {
        'average': round(statistics.mean(percentages), 1),
        'median': round(statistics.median(percentages), 1),
        'highest': max(percentages),
        'lowest': min(percentages),
        'pass_count': pass_count,
        'fail_count': len(percentages) - pass_count,
        'total_students': len(percentages),
        'grade_distribution': distribution
    }


def _valid_score(value, maximum: float) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value) and 0 <= value <= maximum


@dataclass
class PublishResult:
    field: str
    subject_name: str
    published: List[PerformanceRecord] = field(default_factory=list)
    skipped: List[Dict] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'field': self.field,
            'subject_name': self.subject_name,
            'count': len(self.published),
            'results': [record.to_dict() for record in self.published],
            'skipped': self.skipped
        }


class PerformanceService:
    """Publishes mark components.

    A component is written with a conditional update that only matches while
    the column is still NULL, so two publishers racing for the same field
    cannot both succeed.
    """

    def __init__(self, session, notifications: NotificationService = None):
        self.session = session
        self.notifications = notifications or NotificationService(session)

    def _teacher_for_subject(self, teacher_id: int, subject_name: Optional[str]) -> User:
        teacher = self.session.get(User, teacher_id)
        if not teacher or not teacher.subject:
            raise SubjectNotAssigned(
                'You must have an assigned subject to grade students. Please contact administrator.'
            )
        if not Validator.is_text(subject_name):
            raise ValidationError('Subject name is required')
        if not teacher.teaches(subject_name):
            raise SubjectNotAssigned(f'You are only authorized to grade {teacher.subject}')
        return teacher

    def _claim_field(self, student_id: int, subject_name: str, field_name: str, value: float) -> bool:
        """Set the field if it is still unset. Returns False when already published."""
        column = getattr(PerformanceRecord, field_name)
        statement = update(PerformanceRecord).where(
            PerformanceRecord.student_id == student_id,
            PerformanceRecord.subject_name == subject_name,
            column.is_(None)
        ).values({field_name: value})

        if self.session.execute(statement).rowcount == 1:
            self.session.commit()
            return True

        exists = self.session.query(PerformanceRecord.id).filter_by(
            student_id=student_id, subject_name=subject_name
        ).first()
        if exists:
            return False

        self.session.add(PerformanceRecord(
            student_id=student_id,
            subject_name=subject_name,
            **{field_name: value}
        ))
        try:
            self.session.commit()
            return True
        except IntegrityError:
            # Another publisher created the record first
            self.session.rollback()
            claimed = self.session.execute(statement).rowcount == 1
            self.session.commit()
            return claimed

    def publish(self, teacher_id: int, subject_name: str, field_name: str, entries) -> PublishResult:
        """Publish one mark component for a list of ``{student_id, value}`` entries."""
        teacher = self._teacher_for_subject(teacher_id, subject_name)

        if not isinstance(field_name, str) or field_name not in MARK_LIMITS:
            raise ValidationError('Invalid mark component', allowed=list(MARK_LIMITS))
        if not isinstance(entries, list) or not entries:
            raise ValidationError('Marks list is required')

        subject = teacher.subject
        limit = MARK_LIMITS[field_name]
        result = PublishResult(field=field_name, subject_name=subject)

        for entry in entries:
            student_id = entry.get('student_id') if isinstance(entry, dict) else None
            value = entry.get('value') if isinstance(entry, dict) else None

            if not _valid_score(value, limit):
                result.skipped.append({'student_id': student_id, 'reason': 'invalid_value'})
                continue

            student = self.session.get(User, student_id) if Validator.is_id(student_id) else None
            if not student or not student.is_student():
                result.skipped.append({'student_id': student_id, 'reason': 'student_not_found'})
                continue

            if not self._claim_field(student_id, subject, field_name, value):
                logger.warning('Refused overwrite of %s for student %s in %s', field_name, student_id, subject)
                result.skipped.append({'student_id': student_id, 'reason': 'already_published'})
                continue

            self.notifications.notify(
                student_id,
                'New Marks Published',
                f'Marks for {MARK_LABELS[field_name]} have been published for {subject}.',
                type=NotificationType.MARKS_PUBLISHED,
                link='/student/dashboard'
            )
            self.session.commit()

            record = self.session.query(PerformanceRecord).filter_by(
                student_id=student_id, subject_name=subject
            ).one()
            result.published.append(record)

        return result

    def update_engagement(self, teacher_id: int, student_id: int, subject_name: str, score) -> PerformanceRecord:
        """Engagement is a running score and may be changed at any time."""
        teacher = self._teacher_for_subject(teacher_id, subject_name)

        if not _valid_score(score, 100):
            raise ValidationError('Engagement score must be between 0 and 100')

        student = self.session.get(User, student_id) if Validator.is_id(student_id) else None
        if not student or not student.is_student():
            raise StudentNotFound()

        record = self.session.query(PerformanceRecord).filter_by(
            student_id=student_id, subject_name=teacher.subject
        ).first()
        if not record:
            record = PerformanceRecord(student_id=student_id, subject_name=teacher.subject)
            self.session.add(record)

        record.engagement_score = score
        self.session.commit()
        return record

    def records_for_subject(self, teacher_id: int, subject_name: str) -> List[PerformanceRecord]:
        teacher = self._teacher_for_subject(teacher_id, subject_name)
        return self.session.query(PerformanceRecord).filter_by(
            subject_name=teacher.subject
        ).order_by(PerformanceRecord.student_id).all()

    def records_for_student(self, student_id: int) -> List[PerformanceRecord]:
        return self.session.query(PerformanceRecord).filter_by(
            student_id=student_id
        ).order_by(PerformanceRecord.subject_name).all()

    def subject_statistics(self, teacher_id: int, subject_name: str) -> Dict:
        records = self.records_for_subject(teacher_id, subject_name)
        return class_statistics([record.percentage for record in records])
