"""Templated progress reports."""
import logging
from dataclasses import dataclass
from typing import List, Sequence

from edutrack.models.notification import NotificationType
from edutrack.models.report import ProgressReport
from edutrack.models.user import User
from edutrack.services.exceptions import StudentNotFound, ValidationError
from edutrack.services.notification_service import NotificationService
from edutrack.services.risk_service import RiskLevel, RiskService
from edutrack.utils.validators import Validator

logger = logging.getLogger(__name__)

WEAK_SUBJECT_THRESHOLD = 60

MAINTENANCE_PLAN = (
    'Day 1 (Monday): Review recent topics and solve 5 practice problems',
    'Day 2 (Tuesday): Work on a mini-project using current skills',
    'Day 3 (Wednesday): Peer teaching session - explain concepts to classmates',
    'Day 4 (Thursday): Explore advanced topics in your strongest area',
    'Day 5 (Friday): Weekly quiz revision and self-assessment',
    'Day 6 (Saturday): Personal project development',
    'Day 7 (Sunday): Rest and light reading of industry trends',
)

REMEDIATION_PLAN = (
    'Day 1 (Monday): Focus on {first} - watch tutorials and take notes',
    'Day 2 (Tuesday): Practice problems on {first} - solve at least 5 exercises',
    'Day 3 (Wednesday): {second} - complete online module or practical exercise',
    'Day 4 (Thursday): Hands-on practice - build a small project or case study',
    'Day 5 (Friday): Review and consolidate - create summary notes and mind maps',
    'Day 6 (Saturday): Mock test or peer review on weak areas - identify remaining gaps',
    "Day 7 (Sunday): Light revision, professional development reading, and plan next week's focus",
)

RISK_PLAN_EXTRAS = {
    RiskLevel.HIGH: (
        'HIGH PRIORITY: Schedule daily study sessions of at least 2 hours',
        'Seek help from teachers or mentors immediately',
    ),
    RiskLevel.MEDIUM: (
        'Maintain consistent daily study routine of 1-1.5 hours',
    ),
    RiskLevel.LOW: (),
}


@dataclass(frozen=True)
class ComposedReport:
    narrative_text: str
    seven_day_plan: List[str]
    risk_level: RiskLevel


def _pct(value) -> str:
    return f'{value:g}'


def _attendance_sentence(attendance_percent) -> str:
    if attendance_percent >= 90:
        return (f'**Excellent Attendance**: Your attendance of {_pct(attendance_percent)}% '
                'shows strong commitment to learning.')
    if attendance_percent >= 75:
        return (f"**Good Attendance**: Your {_pct(attendance_percent)}% attendance is solid, "
                "but there's room for improvement.")
    return (f'**Attendance Concern**: Your {_pct(attendance_percent)}% attendance needs immediate '
            'attention. Consistent attendance is crucial for success.')


def _performance_sentence(average_score) -> str:
    if average_score >= 80:
        return (f'**Strong Performance**: Your average score of {_pct(average_score)}% '
                'demonstrates excellent understanding.')
    if average_score >= 65:
        return (f'**Moderate Performance**: Your {_pct(average_score)}% average shows potential. '
                'Focus on consistency.')
    return (f'**Performance Needs Improvement**: Your {_pct(average_score)}% average indicates '
            'you need additional support.')


def seven_day_plan(weak_skills: Sequence[str], risk_level: RiskLevel) -> List[str]:
    if not weak_skills:
        plan = list(MAINTENANCE_PLAN)
    else:
        first = weak_skills[0]
        second = weak_skills[1] if len(weak_skills) > 1 else 'Second priority skill'
        plan = [
            line.format(first=first, second=second)
            for line in REMEDIATION_PLAN
        ]

    plan.extend(RISK_PLAN_EXTRAS[RiskLevel(risk_level)])
    return plan


def compose(student_name: str, attendance_percent, average_score,
            weak_skills: Sequence[str], risk_level) -> ComposedReport:
    """Render the narrative and 7-day plan. No scoring happens here."""
    risk_level = RiskLevel(risk_level)
    lines = [
        f'**Personalized Learning Analysis for {student_name}**',
        '',
        _attendance_sentence(attendance_percent),
        '',
        _performance_sentence(average_score),
        '',
    ]

    if weak_skills:
        lines.append('**Areas Requiring Immediate Attention**:')
        lines.extend(f'- {skill}' for skill in weak_skills)
    else:
        lines.append("**All Skills Strong**: You're performing well across all skill areas!")

    lines.extend([
        '',
        '**Academic Focus**: Focus on strengthening your core foundation through systematic '
        'problem-solving, project work, and professional development.',
    ])

    return ComposedReport(
        narrative_text='\n'.join(lines) + '\n',
        seven_day_plan=seven_day_plan(weak_skills, risk_level),
        risk_level=risk_level
    )


class ReportService:
    """Generates, stores and delivers progress reports."""

    def __init__(self, session, risk_service: RiskService = None,
                 notifications: NotificationService = None):
        self.session = session
        self.risk_service = risk_service or RiskService(session)
        self.notifications = notifications or NotificationService(session)

    def generate(self, teacher_id: int, student_id: int) -> ProgressReport:
        if not Validator.is_id(student_id):
            raise ValidationError('Invalid student ID')
        student = self.session.get(User, student_id)
        if not student or not student.is_student():
            raise StudentNotFound()

        standing = self.risk_service.standing(student_id)
        weak_areas = [
            f'{subject} ({score:g}%)'
            for subject, score in standing.subject_scores
            if score < WEAK_SUBJECT_THRESHOLD
        ]

        composed = compose(
            student.name,
            standing.attendance_percent,
            standing.average_score,
            weak_areas,
            standing.risk_level
        )

        report = ProgressReport(
            student_id=student_id,
            generated_by=teacher_id,
            report_text=composed.narrative_text,
            recommended_plan=composed.seven_day_plan,
            risk_level=composed.risk_level.value,
            attendance_percent=standing.attendance_percent,
            average_score=standing.average_score
        )
        self.session.add(report)
        self.session.flush()

        self.notifications.notify(
            student_id,
            'New Progress Report Available',
            'Your teacher has generated a performance report for you. '
            'Check it out to see your progress and recommendations!',
            type=NotificationType.PROGRESS_REPORT,
            link='/student/reports',
            report_id=report.id
        )
        self.session.commit()

        logger.info('Progress report %s generated for student %s (%s risk)',
                    report.id, student_id, report.risk_level)
        return report

    def reports_for_student(self, student_id: int) -> List[ProgressReport]:
        return self.session.query(ProgressReport).filter_by(
            student_id=student_id
        ).order_by(ProgressReport.created_at.desc(), ProgressReport.id.desc()).all()
