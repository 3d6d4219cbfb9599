"""Per-subject marks for a student."""
from edutrack import db
from edutrack.models.base import BaseModel
from edutrack.utils.metrics import round_half_up

# Publishable mark components and their maximum values.
MARK_LIMITS = {
    'mid_sem_1': 10,
    'mid_sem_2': 10,
    'end_sem': 70,
    'assignment': 10,
}

MARK_LABELS = {
    'mid_sem_1': 'Mid-Sem 1',
    'mid_sem_2': 'Mid-Sem 2',
    'end_sem': 'End Semester',
    'assignment': 'Assignment',
}

class PerformanceRecord(BaseModel):
    """Mark components for one (student, subject) pair.

    Each component starts unset and is published once; after that it is
    locked.
    """

    __tablename__ = 'performance_records'
    __table_args__ = (
        db.UniqueConstraint('student_id', 'subject_name', name='uq_performance_student_subject'),
    )

    student_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    subject_name = db.Column(db.String(120), nullable=False)

    mid_sem_1 = db.Column(db.Float, nullable=True)
    mid_sem_2 = db.Column(db.Float, nullable=True)
    end_sem = db.Column(db.Float, nullable=True)
    assignment = db.Column(db.Float, nullable=True)
    engagement_score = db.Column(db.Float, nullable=False, default=0)

    @property
    def total(self) -> float:
        """Sum of components out of 100, unset components counting as zero."""
        return sum(getattr(self, field) or 0 for field in MARK_LIMITS)

    @property
    def percentage(self) -> int:
        return round_half_up(self.total / sum(MARK_LIMITS.values()) * 100)

    def to_dict(self):
        data = super().to_dict()
        data['total'] = self.total
        data['percentage'] = self.percentage
        return data

    def __repr__(self):
        return f'<PerformanceRecord {self.student_id}:{self.subject_name}>'
