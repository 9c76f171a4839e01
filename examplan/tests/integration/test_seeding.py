# examplan/tests/integration/test_seeding.py

import pytest
from datetime import datetime
from decimal import Decimal

from faker import Faker
from sqlalchemy import func, select

from examplan.models import ClassCourse, StudentCourseEnrollment
from examplan.schemas.exam_scheduler import ScheduleRequest
from examplan.seeding import seed_demo_institution
from examplan.services.scheduling import ExamSchedulerService

pytestmark = pytest.mark.asyncio


async def test_seeded_institution_is_schedulable(db_session):
    faker = Faker()
    faker.seed_instance(7)

    seeded = await seed_demo_institution(
        db_session, classes=2, courses_per_class=3, students_per_class=4, faker=faker
    )

    counts = seeded["counts"]
    assert counts == {"classes": 2, "class_courses": 6, "students": 8, "enrollments": 24}
    stored = (
        await db_session.execute(
            select(func.count())
            .select_from(StudentCourseEnrollment)
            .join(ClassCourse, ClassCourse.id == StudentCourseEnrollment.class_course_id)
            .where(ClassCourse.institution_id == seeded["institution_id"])
        )
    ).scalar_one()
    assert stored == 24

    summary = await ExamSchedulerService(db_session).schedule(
        ScheduleRequest(
            academic_year_id=seeded["academic_year_id"],
            semester_id=seeded["semester_id"],
            exam_type_id=seeded["exam_type_ids"]["Midterm"],
            percentage=Decimal("30"),
            date_start=datetime(2025, 3, 1),
            date_end=datetime(2025, 3, 14),
        ),
        seeded["admin_profile_id"],
        seeded["institution_id"],
    )
    assert summary.created == 6
    assert summary.run_id is not None


async def test_second_institution_reuses_semester(db_session):
    first = await seed_demo_institution(db_session, classes=1, courses_per_class=1)
    second = await seed_demo_institution(db_session, classes=1, courses_per_class=1)

    assert first["institution_id"] != second["institution_id"]
    assert first["semester_id"] == second["semester_id"]
