"""Demo data seeding tests."""
import random

from edutrack import db
from edutrack.models import AttendanceRecord, PerformanceRecord, User, UserRole
from edutrack.services.risk_service import RiskService
from edutrack.services.seed_service import SeedService

def test_seed_all_is_repeatable(app):
    service = SeedService(db.session, random.Random(7))

    service.seed_all(students=4, days=5)
    service.seed_all(students=4, days=5)

    assert User.query.filter_by(role=UserRole.TEACHER).count() == 1
    assert User.query.filter_by(role=UserRole.STUDENT).count() == 4
    assert AttendanceRecord.query.count() == 20
    assert PerformanceRecord.query.count() == 4

def test_seeded_teacher_sees_students(app):
    SeedService(db.session, random.Random(3)).seed_all(students=6, days=3)

    teacher = User.query.filter_by(role=UserRole.TEACHER).one()
    assert len(RiskService(db.session).students_for_teacher(teacher)) == 6

def test_seed_command(app):
    result = app.test_cli_runner().invoke(args=['seed-db'])

    assert 'Database seeded successfully!' in result.output
    assert User.query.count() == 13
