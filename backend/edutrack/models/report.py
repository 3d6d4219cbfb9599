"""Persisted progress report."""
from edutrack import db
from edutrack.models.base import BaseModel

class ProgressReport(BaseModel):
    """Composed narrative report and study plan for a student."""

    __tablename__ = 'progress_reports'
    __table_args__ = (
        db.Index('ix_progress_reports_student_created', 'student_id', 'created_at'),
    )

    student_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    generated_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    report_text = db.Column(db.Text, nullable=False)
    recommended_plan = db.Column(db.JSON, nullable=False, default=list)
    risk_level = db.Column(db.String(10), nullable=False)

    # Inputs the report was composed from
    attendance_percent = db.Column(db.Float, nullable=False)
    average_score = db.Column(db.Float, nullable=False)

    def __repr__(self):
        return f'<ProgressReport {self.student_id} {self.risk_level}>'
