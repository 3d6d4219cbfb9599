"""Database seeding service for demo data."""
import random
from datetime import timedelta

from edutrack.models.attendance import AttendanceRecord, AttendanceStatus
from edutrack.models.performance import MARK_LIMITS, PerformanceRecord
from edutrack.models.user import User, UserRole
from edutrack.utils.dates import local_date, utc_now

DEMO_DEPARTMENT = 'Computer Science & Engineering'
DEMO_PASSWORD = 'password123'


class SeedService:
    """Seeds a department with a teacher, students, attendance and marks."""

    def __init__(self, session, rng: random.Random = None):
        self.session = session
        self.rng = rng or random.Random()

    def seed_all(self, students: int = 12, days: int = 20):
        teacher = self.seed_teacher()
        roster = self.seed_students(students)
        self.seed_attendance(teacher, roster, days)
        self.seed_marks(teacher, roster)
        self.session.commit()

    def seed_teacher(self) -> User:
        teacher = self.session.query(User).filter_by(email='teacher@university.edu').first()
        if teacher:
            return teacher

        teacher = User(
            email='teacher@university.edu',
            name='Dr. Anita Rao',
            role=UserRole.TEACHER,
            department=DEMO_DEPARTMENT,
            years_taught=[2, 3],
            subject='Data Structures'
        )
        teacher.set_password(DEMO_PASSWORD)
        self.session.add(teacher)
        self.session.flush()
        return teacher

    def seed_students(self, count: int):
        first_names = ['Aarav', 'Diya', 'Ishaan', 'Meera', 'Kabir', 'Ananya', 'Rohan', 'Sara', 'Vikram', 'Nisha']
        last_names = ['Sharma', 'Iyer', 'Reddy', 'Patel', 'Nair', 'Gupta', 'Singh']

        roster = []
        for index in range(count):
            email = f'student{index + 1:02d}@university.edu'
            student = self.session.query(User).filter_by(email=email).first()
            if not student:
                student = User(
                    email=email,
                    name=f'{self.rng.choice(first_names)} {self.rng.choice(last_names)}',
                    role=UserRole.STUDENT,
                    department=DEMO_DEPARTMENT,
                    year=self.rng.choice([2, 3])
                )
                student.set_password(DEMO_PASSWORD)
                self.session.add(student)
            roster.append(student)

        self.session.flush()
        return roster

    def seed_attendance(self, teacher: User, roster, days: int):
        today = local_date(utc_now())
        statuses = [AttendanceStatus.PRESENT] * 7 + [AttendanceStatus.LATE, AttendanceStatus.ABSENT, AttendanceStatus.ABSENT]

        for student in roster:
            for offset in range(1, days + 1):
                day = today - timedelta(days=offset)
                if self.session.query(AttendanceRecord.id).filter_by(student_id=student.id, date=day).first():
                    continue
                self.session.add(AttendanceRecord(
                    student_id=student.id,
                    date=day,
                    status=self.rng.choice(statuses),
                    marked_by=teacher.id
                ))

    def seed_marks(self, teacher: User, roster):
        for student in roster:
            if self.session.query(PerformanceRecord.id).filter_by(
                    student_id=student.id, subject_name=teacher.subject).first():
                continue
            marks = {
                field: round(self.rng.uniform(limit * 0.3, limit), 1)
                for field, limit in MARK_LIMITS.items()
            }
            self.session.add(PerformanceRecord(
                student_id=student.id,
                subject_name=teacher.subject,
                engagement_score=self.rng.randint(30, 100),
                **marks
            ))
