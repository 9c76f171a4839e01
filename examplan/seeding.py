#!/usr/bin/env python3

# examplan/seeding.py
"""
Demo data for the exam scheduler: one institution with a faculty, programs,
classes, courses, rostered students, exam types and an admin account.

Usage: python -m examplan.seeding --classes 4 --courses-per-class 5 --seed 42
"""

import asyncio
import argparse
import logging
import random
import sys
from datetime import date
from typing import Any, Dict, List, Optional

from faker import Faker
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .core.config import settings
from .core.security import create_access_token
from .database import db_manager, init_db
from .models import (
    AcademicYear,
    ClassCourse,
    Course,
    DomainUser,
    EnrollmentStatusEnum,
    ExamType,
    Faculty,
    Institution,
    Program,
    SchoolClass,
    Semester,
    Student,
    StudentCourseEnrollment,
    User,
)

logger = logging.getLogger(__name__)

DEFAULT_EXAM_TYPES = ("Midterm", "Final", "Quiz")


async def _get_or_create_semester(session: AsyncSession, code: str, name: str, order: int) -> Semester:
    result = await session.execute(select(Semester).where(Semester.code == code))
    semester = result.scalar_one_or_none()
    if semester is None:
        semester = Semester(code=code, name=name, order_index=order)
        session.add(semester)
        await session.flush()
    return semester


async def seed_demo_institution(
    session: AsyncSession,
    *,
    classes: int = 3,
    courses_per_class: int = 4,
    students_per_class: int = 10,
    faker: Optional[Faker] = None,
) -> Dict[str, Any]:
    """
    Insert one complete institution graph and commit it.

    Returns the ids a caller needs to drive the scheduler (institution,
    academic year, semester, exam types, classes, admin user) plus row counts.
    """
    fake = faker or Faker()
    suffix = fake.unique.bothify("??##").upper()

    institution = Institution(code=f"INST-{suffix}", name=f"{fake.company()} University")
    session.add(institution)
    await session.flush()

    faculty = Faculty(
        institution_id=institution.id, code=f"FAC-{suffix}", name="Faculty of Sciences"
    )
    session.add(faculty)
    await session.flush()

    program = Program(
        institution_id=institution.id,
        faculty_id=faculty.id,
        code=f"PRG-{suffix}",
        name=f"{fake.word().title()} Studies",
    )
    session.add(program)

    today = date.today()
    academic_year = AcademicYear(
        institution_id=institution.id,
        name=f"{today.year}/{today.year + 1}",
        start_date=date(today.year, 9, 1),
        end_date=date(today.year + 1, 7, 31),
        is_active=True,
    )
    session.add(academic_year)
    semester = await _get_or_create_semester(session, "S1", "First Semester", 1)
    await session.flush()

    exam_types = [
        ExamType(institution_id=institution.id, name=name) for name in DEFAULT_EXAM_TYPES
    ]
    session.add_all(exam_types)

    courses: List[Course] = []
    for i in range(courses_per_class):
        courses.append(
            Course(
                program_id=program.id,
                code=f"{suffix}{101 + i}",
                name=f"{fake.unique.catch_phrase().title()}",
            )
        )
    session.add_all(courses)
    await session.flush()

    class_rows: List[SchoolClass] = []
    counts = {"class_courses": 0, "students": 0, "enrollments": 0}
    for c in range(classes):
        school_class = SchoolClass(
            institution_id=institution.id,
            program_id=program.id,
            academic_year_id=academic_year.id,
            semester_id=semester.id,
            code=f"{suffix}-C{c + 1}",
            name=f"Class {chr(ord('A') + c % 26)}{c // 26 or ''}",
        )
        session.add(school_class)
        await session.flush()
        class_rows.append(school_class)

        class_courses = [
            ClassCourse(
                institution_id=institution.id,
                class_id=school_class.id,
                course_id=course.id,
                semester_id=semester.id,
            )
            for course in courses
        ]
        session.add_all(class_courses)

        students = [
            Student(
                institution_id=institution.id,
                class_id=school_class.id,
                registration_number=f"{suffix}/{c + 1:02d}/{s + 1:04d}",
                first_name=fake.first_name(),
                last_name=fake.last_name(),
            )
            for s in range(students_per_class)
        ]
        session.add_all(students)
        await session.flush()

        session.add_all(
            StudentCourseEnrollment(
                student_id=student.id,
                class_course_id=class_course.id,
                status=random.choice(
                    [EnrollmentStatusEnum.planned.value, EnrollmentStatusEnum.active.value]
                ),
            )
            for student in students
            for class_course in class_courses
        )
        counts["class_courses"] += len(class_courses)
        counts["students"] += len(students)
        counts["enrollments"] += len(students) * len(class_courses)

    admin = User(
        email=f"admin.{suffix.lower()}@{fake.domain_name()}",
        institution_id=institution.id,
        role="admin",
        is_active=True,
    )
    session.add(admin)
    await session.flush()
    profile = DomainUser(
        user_id=admin.id,
        institution_id=institution.id,
        first_name=fake.first_name(),
        last_name=fake.last_name(),
        primary_email=admin.email,
    )
    session.add(profile)
    await session.commit()

    return {
        "institution_id": institution.id,
        "academic_year_id": academic_year.id,
        "semester_id": semester.id,
        "faculty_id": faculty.id,
        "exam_type_ids": {et.name: et.id for et in exam_types},
        "class_ids": [cls.id for cls in class_rows],
        "admin_user_id": admin.id,
        "admin_profile_id": profile.id,
        "counts": {"classes": len(class_rows), **counts},
    }


async def main():
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s"
    )
    parser = argparse.ArgumentParser(
        description="Seed the database with a demo institution for the exam scheduler."
    )
    parser.add_argument("--database-url", help="Database connection URL.")
    parser.add_argument("--classes", type=int, default=3, help="Number of classes.")
    parser.add_argument(
        "--courses-per-class", type=int, default=4, help="Courses taken by each class."
    )
    parser.add_argument(
        "--students-per-class", type=int, default=10, help="Students in each class."
    )
    parser.add_argument(
        "--create-tables", action="store_true", help="Create missing tables first."
    )
    parser.add_argument("--seed", type=int, help="A seed for the random number generator.")
    args = parser.parse_args()

    if args.seed is not None:
        random.seed(args.seed)
        Faker.seed(args.seed)

    try:
        await init_db(
            database_url=args.database_url or settings.DATABASE_URL,
            create_tables=args.create_tables,
        )
        async with db_manager.get_session() as session:
            seeded = await seed_demo_institution(
                session,
                classes=args.classes,
                courses_per_class=args.courses_per_class,
                students_per_class=args.students_per_class,
            )
    except Exception as e:
        logger.critical(f"Seeding failed: {e}", exc_info=True)
        sys.exit(1)
    finally:
        await db_manager.close()

    logger.info(f"Seeded institution {seeded['institution_id']}: {seeded['counts']}")
    logger.info(f"Academic year: {seeded['academic_year_id']}")
    logger.info(f"Semester: {seeded['semester_id']}")
    for name, exam_type_id in seeded["exam_type_ids"].items():
        logger.info(f"Exam type {name}: {exam_type_id}")
    token = create_access_token(str(seeded["admin_user_id"]))
    logger.info(f"Admin bearer token: {token}")


def cli():
    asyncio.run(main())


if __name__ == "__main__":
    cli()
