# examplan/tests/conftest.py

import pytest
import pytest_asyncio
from typing import AsyncGenerator, Any, Dict
from uuid import uuid4
from datetime import date

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from examplan.api.deps import db_session as db_session_dependency
from examplan.core.security import create_access_token
from examplan.main import create_app
from examplan.models import (
    Base,
    AcademicYear,
    ClassCourse,
    Course,
    DomainUser,
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

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

COURSE_NAMES = ["Algebra", "Biology", "Chemistry", "Drawing", "Economics"]


@pytest_asyncio.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    async_session_maker = async_sessionmaker(
        test_engine, expire_on_commit=False, class_=AsyncSession
    )
    async with async_session_maker() as session:
        yield session


async def build_institution(
    session: AsyncSession,
    label: str,
    *,
    class_count: int = 2,
    courses_per_class: int = 1,
    students_per_class: int = 2,
) -> Dict[str, Any]:
    """
    Insert an institution with ``class_count`` classes (named "Class A",
    "Class B", ...) in one program, each taking ``courses_per_class`` courses
    with every student enrolled. Returns plain ids.
    """
    suffix = uuid4().hex[:6]
    institution = Institution(code=f"{label}-{suffix}", name=f"{label} University")
    session.add(institution)
    await session.flush()

    faculty = Faculty(institution_id=institution.id, code=f"F-{suffix}", name="Sciences")
    semester = Semester(code=f"S1-{suffix}", name="First Semester", order_index=1)
    academic_year = AcademicYear(
        institution_id=institution.id,
        name="2024/2025",
        start_date=date(2024, 9, 1),
        end_date=date(2025, 7, 31),
        is_active=True,
    )
    session.add_all([faculty, semester, academic_year])
    await session.flush()

    program = Program(
        institution_id=institution.id,
        faculty_id=faculty.id,
        code=f"P-{suffix}",
        name="General Studies",
    )
    midterm = ExamType(institution_id=institution.id, name="Midterm")
    final = ExamType(institution_id=institution.id, name="Final")
    session.add_all([program, midterm, final])
    await session.flush()

    class_ids = []
    class_course_ids = []
    for c in range(class_count):
        school_class = SchoolClass(
            institution_id=institution.id,
            program_id=program.id,
            academic_year_id=academic_year.id,
            semester_id=semester.id,
            code=f"C{c + 1}-{suffix}",
            name=f"Class {chr(ord('A') + c)}",
        )
        session.add(school_class)
        await session.flush()
        class_ids.append(school_class.id)

        students = [
            Student(
                institution_id=institution.id,
                class_id=school_class.id,
                registration_number=f"{suffix}/{c}/{s}",
                first_name="Student",
                last_name=str(s),
            )
            for s in range(students_per_class)
        ]
        session.add_all(students)
        await session.flush()

        for k in range(courses_per_class):
            course = Course(
                program_id=program.id,
                code=f"{suffix}-{c}{k}",
                name=COURSE_NAMES[(c + k) % len(COURSE_NAMES)],
            )
            session.add(course)
            await session.flush()
            class_course = ClassCourse(
                institution_id=institution.id,
                class_id=school_class.id,
                course_id=course.id,
                semester_id=semester.id,
            )
            session.add(class_course)
            await session.flush()
            class_course_ids.append(class_course.id)
            session.add_all(
                StudentCourseEnrollment(
                    student_id=student.id,
                    class_course_id=class_course.id,
                    status="active",
                )
                for student in students
            )

    admin = User(
        email=f"admin-{suffix}@example.com",
        institution_id=institution.id,
        role="admin",
    )
    session.add(admin)
    await session.flush()
    profile = DomainUser(
        user_id=admin.id,
        institution_id=institution.id,
        first_name="Ada",
        last_name="Admin",
        primary_email=admin.email,
    )
    session.add(profile)
    await session.commit()

    return {
        "institution_id": institution.id,
        "faculty_id": faculty.id,
        "program_id": program.id,
        "semester_id": semester.id,
        "academic_year_id": academic_year.id,
        "exam_type_id": midterm.id,
        "final_exam_type_id": final.id,
        "class_ids": class_ids,
        "class_course_ids": class_course_ids,
        "admin_user_id": admin.id,
        "admin_profile_id": profile.id,
    }


@pytest.fixture
def make_institution(db_session):
    async def _make(label: str = "North", **kwargs) -> Dict[str, Any]:
        return await build_institution(db_session, label, **kwargs)

    return _make


@pytest_asyncio.fixture
async def scheduling_data(make_institution) -> Dict[str, Any]:
    """Two classes with one rostered class-course each."""
    return await make_institution("North")


@pytest_asyncio.fixture
async def other_institution(make_institution) -> Dict[str, Any]:
    return await make_institution("South")


@pytest.fixture
def make_auth_headers():
    def _headers(user_id) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(str(user_id))}"}

    return _headers


@pytest.fixture
def admin_headers(scheduling_data, make_auth_headers) -> Dict[str, str]:
    return make_auth_headers(scheduling_data["admin_user_id"])


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app with the test session injected."""
    app = create_app(use_lifespan=False)

    async def override_db_session():
        yield db_session

    app.dependency_overrides[db_session_dependency] = override_db_session

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://testserver"
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()
