"""Risk classification, the teacher roster and at-risk student alerts."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from sqlalchemy import or_

from edutrack.models.attendance import AttendanceRecord
from edutrack.models.performance import MARK_LIMITS, PerformanceRecord
from edutrack.models.user import User, UserRole
from edutrack.services.exceptions import StudentNotFound, ValidationError
from edutrack.utils.metrics import calculate_average, calculate_percentage, calculate_weighted_average

HIGH_RISK_ATTENDANCE = 60
MEDIUM_RISK_ATTENDANCE = 75
HIGH_RISK_SCORE = 50
MEDIUM_RISK_SCORE = 65


class RiskLevel(str, Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'


RISK_ORDER = {RiskLevel.HIGH: 0, RiskLevel.MEDIUM: 1, RiskLevel.LOW: 2}

# Sort keys over (student, standing) rows; ties keep name order
ROSTER_SORTS = {
    'name': lambda row: row[0].name.lower(),
    'attendance': lambda row: -row[1].attendance_percent,
    'score': lambda row: -row[1].average_score,
    'risk': lambda row: RISK_ORDER[row[1].risk_level],
}


def clamp_percent(value) -> float:
    """Clamp to [0, 100]; missing values count as 0."""
    if value is None:
        return 0
    return max(0, min(100, value))


def classify(attendance_percent: float, average_score: float) -> RiskLevel:
    """Threshold rule, first match wins.

    high:   attendance < 60 or score < 50
    medium: attendance in [60, 75] or score in [50, 65]
    low:    otherwise
    """
    if attendance_percent < HIGH_RISK_ATTENDANCE or average_score < HIGH_RISK_SCORE:
        return RiskLevel.HIGH

    if (HIGH_RISK_ATTENDANCE <= attendance_percent <= MEDIUM_RISK_ATTENDANCE or
            HIGH_RISK_SCORE <= average_score <= MEDIUM_RISK_SCORE):
        return RiskLevel.MEDIUM

    return RiskLevel.LOW


@dataclass
class StudentStanding:
    """Aggregated attendance and marks for one student."""
    student_id: int
    attendance_percent: int
    average_score: int
    engagement_score: int
    total_days: int = 0
    subject_scores: List[Tuple[str, float]] = field(default_factory=list)

    @property
    def risk_level(self) -> RiskLevel:
        return classify(clamp_percent(self.attendance_percent), clamp_percent(self.average_score))

    def to_dict(self) -> Dict:
        return {
            'student_id': self.student_id,
            'attendance_percent': self.attendance_percent,
            'average_score': self.average_score,
            'engagement_score': self.engagement_score,
            'total_days': self.total_days,
            'subject_scores': [
                {'subject': subject, 'score': score} for subject, score in self.subject_scores
            ],
            'risk_level': self.risk_level.value
        }


def recommendations(level: RiskLevel, standing: StudentStanding) -> List[str]:
    advice = []

    if standing.attendance_percent < 75:
        advice.append('Improve attendance to maintain consistent learning')
    if standing.average_score < 65:
        advice.append('Focus on strengthening fundamental concepts')
    if standing.engagement_score < 60:
        advice.append('Increase class participation and engagement')

    if level == RiskLevel.HIGH:
        advice.append('Consider one-on-one tutoring sessions')
        advice.append('Set up weekly progress check-ins with teacher')
    elif level == RiskLevel.MEDIUM:
        advice.append('Allocate more time for self-study')
        advice.append('Join peer study groups')

    return advice


class RiskService:
    """Builds student standings from stored attendance and marks."""

    def __init__(self, session):
        self.session = session

    def standing(self, student_id: int) -> StudentStanding:
        records = self.session.query(AttendanceRecord).filter_by(student_id=student_id).all()
        attended = sum(1 for record in records if record.attended)

        performances = self.session.query(PerformanceRecord).filter_by(student_id=student_id).all()
        subject_averages = [
            calculate_weighted_average([(getattr(p, name), limit) for name, limit in MARK_LIMITS.items()])
            for p in performances
        ]

        return StudentStanding(
            student_id=student_id,
            attendance_percent=calculate_percentage(attended, len(records)),
            average_score=calculate_average(subject_averages),
            engagement_score=calculate_average(p.engagement_score for p in performances),
            total_days=len(records),
            subject_scores=[(p.subject_name, p.total) for p in performances]
        )

    def assess(self, student_id: int) -> Dict:
        student = self.session.get(User, student_id)
        if not student or not student.is_student():
            raise StudentNotFound()

        standing = self.standing(student_id)
        level = standing.risk_level
        return {
            'student': student.to_dict(),
            'standing': standing.to_dict(),
            'risk_level': level.value,
            'recommendations': recommendations(level, standing)
        }

    def _students_query(self, teacher: User):
        """Students in the teacher's department and taught years."""
        query = self.session.query(User).filter(
            User.role == UserRole.STUDENT,
            User.department == teacher.department
        )
        if teacher.years_taught:
            query = query.filter(User.year.in_(teacher.years_taught))
        return query

    def students_for_teacher(self, teacher: User) -> List[User]:
        return self._students_query(teacher).order_by(User.name).all()

    def roster(self, teacher: User, search: Optional[str] = None, risk_level: Optional[str] = None,
               sort_by: str = 'name') -> List[Dict]:
        """Teacher's students with their standing, filtered and sorted."""
        if risk_level is not None:
            try:
                risk_level = RiskLevel(risk_level)
            except ValueError:
                raise ValidationError('Invalid risk level', allowed=[level.value for level in RiskLevel])
        if sort_by not in ROSTER_SORTS:
            raise ValidationError('Invalid sort order', allowed=list(ROSTER_SORTS))

        query = self._students_query(teacher)
        if search and search.strip():
            pattern = f'%{search.strip()}%'
            query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))

        rows = []
        for student in query.order_by(User.name).all():
            standing = self.standing(student.id)
            if risk_level is not None and standing.risk_level != risk_level:
                continue
            rows.append((student, standing))

        rows.sort(key=ROSTER_SORTS[sort_by])
        return [
            {
                'student': student.to_dict(),
                'attendance_percent': standing.attendance_percent,
                'average_score': standing.average_score,
                'engagement_score': standing.engagement_score,
                'risk_level': standing.risk_level.value
            }
            for student, standing in rows
        ]

    def risk_alerts(self, teacher: User) -> List[Dict]:
        """Medium and high risk students, high first then lowest score first."""
        alerts = []

        for student in self.students_for_teacher(teacher):
            standing = self.standing(student.id)
            level = standing.risk_level
            if level == RiskLevel.LOW:
                continue

            reasons = []
            interventions = []

            if standing.attendance_percent < 75:
                reasons.append(f'Low attendance: {standing.attendance_percent}%')
                interventions.append('Schedule parent meeting to discuss attendance')
                interventions.append('Provide flexible attendance options if needed')

            if standing.average_score < 60:
                reasons.append(f'Low academic performance: {standing.average_score}%')
                interventions.append('Arrange extra tutoring sessions')
                interventions.append('Provide additional practice assignments')

            if standing.engagement_score < 50:
                reasons.append(f'Low engagement: {standing.engagement_score}%')
                interventions.append('One-on-one mentoring session')
                interventions.append('Assign peer study group')

            if not reasons:
                reasons.append('Multiple factors contributing to risk')
                interventions.append('Comprehensive academic review session')

            alerts.append({
                'student': student.to_dict(),
                'attendance_percent': standing.attendance_percent,
                'average_score': standing.average_score,
                'engagement_score': standing.engagement_score,
                'risk_level': level.value,
                'reasons': reasons,
                'interventions': interventions
            })

        alerts.sort(key=lambda alert: (alert['risk_level'] != RiskLevel.HIGH.value, alert['average_score']))
        return alerts
