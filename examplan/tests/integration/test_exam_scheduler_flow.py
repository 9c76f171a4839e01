# examplan/tests/integration/test_exam_scheduler_flow.py

"""
End-to-end scheduling runs against a real (in-memory) database.
"""

import pytest
from uuid import uuid4
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import delete, func, select

from examplan.core.exceptions import InvalidSelectionError, NotFoundError
from examplan.models import Exam, ExamScheduleRun, StudentCourseEnrollment
from examplan.schemas.exam_scheduler import HistoryQuery, PreviewRequest, ScheduleRequest
from examplan.services.exams import ExamCreateData, ExamService
from examplan.services.scheduling import ExamSchedulerService

pytestmark = pytest.mark.asyncio


def schedule_request(data, **overrides) -> ScheduleRequest:
    payload = dict(
        academic_year_id=data["academic_year_id"],
        semester_id=data["semester_id"],
        exam_type_id=data["exam_type_id"],
        percentage=Decimal("40"),
        date_start=datetime(2025, 1, 1),
        date_end=datetime(2025, 1, 10),
    )
    payload.update(overrides)
    return ScheduleRequest(**payload)


async def run_schedule(session, data, **overrides):
    service = ExamSchedulerService(session)
    return await service.schedule(
        schedule_request(data, **overrides),
        data["admin_profile_id"],
        data["institution_id"],
    )


def in_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without an offset; they are stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


async def count_exams(session, institution_id) -> int:
    stmt = select(func.count()).select_from(Exam).where(Exam.institution_id == institution_id)
    return (await session.execute(stmt)).scalar_one()


async def test_first_run_creates_exams_across_window(db_session, scheduling_data):
    summary = await run_schedule(db_session, scheduling_data)

    assert summary.created == 2
    assert summary.duplicates == 0
    assert summary.skipped == 0
    assert summary.conflicts == 0
    assert summary.class_count == 2
    assert summary.class_course_count == 2
    assert summary.run_id is not None
    assert summary.persistence_error is None

    exams = (
        await db_session.execute(select(Exam).where(Exam.id.in_(summary.exam_ids)))
    ).scalars().all()
    assert sorted(in_utc(e.date) for e in exams) == [
        datetime(2025, 1, 1, tzinfo=timezone.utc),
        datetime(2025, 1, 10, tzinfo=timezone.utc),
    ]
    assert {e.name for e in exams} == {"Algebra - Midterm", "Biology - Midterm"}
    assert all(e.type == "Midterm" for e in exams)
    assert all(e.schedule_run_id == summary.run_id for e in exams)
    assert all(e.status == "scheduled" for e in exams)


async def test_repeated_run_only_finds_duplicates(db_session, scheduling_data):
    await run_schedule(db_session, scheduling_data)

    summary = await run_schedule(db_session, scheduling_data)

    assert summary.created == 0
    assert summary.duplicates == 2
    assert summary.skipped == 2
    assert summary.exam_ids == []
    assert await count_exams(db_session, scheduling_data["institution_id"]) == 2
    runs = (await db_session.execute(select(func.count()).select_from(ExamScheduleRun))).scalar_one()
    assert runs == 2


async def test_narrowed_to_one_class(db_session, scheduling_data):
    summary = await run_schedule(
        db_session, scheduling_data, class_ids=[scheduling_data["class_ids"][0]]
    )

    assert summary.created == 1
    assert summary.class_count == 1
    assert summary.class_course_count == 1


async def test_unknown_academic_year(db_session, scheduling_data):
    with pytest.raises(NotFoundError):
        await run_schedule(db_session, scheduling_data, academic_year_id=uuid4())

    assert await count_exams(db_session, scheduling_data["institution_id"]) == 0


async def test_foreign_exam_type(db_session, scheduling_data, other_institution):
    with pytest.raises(NotFoundError):
        await run_schedule(
            db_session, scheduling_data, exam_type_id=other_institution["exam_type_id"]
        )


async def test_foreign_class_ids_match_nothing(db_session, scheduling_data, other_institution):
    with pytest.raises(InvalidSelectionError):
        await run_schedule(
            db_session, scheduling_data, class_ids=other_institution["class_ids"]
        )

    assert await count_exams(db_session, other_institution["institution_id"]) == 0


async def test_classes_without_courses(db_session, make_institution):
    data = await make_institution("Empty", courses_per_class=0)

    with pytest.raises(InvalidSelectionError, match="do not have assigned courses"):
        await run_schedule(db_session, data)


async def test_rejections_are_counted_and_batch_continues(db_session, scheduling_data):
    # Class A already carries 70% through a Final exam
    await ExamService(db_session).create_exam(
        ExamCreateData(
            name="Algebra - Final",
            type="Final",
            date=datetime(2025, 2, 1),
            percentage=Decimal("70"),
            class_course_id=scheduling_data["class_course_ids"][0],
        ),
        None,
        scheduling_data["institution_id"],
    )

    summary = await run_schedule(db_session, scheduling_data)

    assert summary.created == 1
    assert summary.conflicts == 1
    assert summary.duplicates == 0
    assert summary.skipped == 1
    assert summary.created + summary.skipped == summary.class_course_count


async def test_empty_roster_is_a_conflict(db_session, scheduling_data):
    await db_session.execute(
        delete(StudentCourseEnrollment).where(
            StudentCourseEnrollment.class_course_id == scheduling_data["class_course_ids"][1]
        )
    )
    await db_session.commit()

    summary = await run_schedule(db_session, scheduling_data)

    assert summary.created == 1
    assert summary.conflicts == 1


async def test_conservation_with_mixed_outcomes(db_session, make_institution):
    data = await make_institution("Mixed", class_count=3, courses_per_class=2)
    first = await run_schedule(db_session, data, class_ids=data["class_ids"][:1])

    summary = await run_schedule(db_session, data)

    assert first.created == 2
    assert summary.duplicates == 2
    assert summary.created == 4
    assert summary.created + summary.skipped == summary.class_course_count
    assert summary.skipped >= summary.duplicates


async def test_preview_matches_schedule_selection(db_session, scheduling_data):
    service = ExamSchedulerService(db_session)

    preview = await service.preview(
        PreviewRequest(
            academic_year_id=scheduling_data["academic_year_id"],
            semester_id=scheduling_data["semester_id"],
        ),
        scheduling_data["institution_id"],
    )
    summary = await run_schedule(db_session, scheduling_data)

    assert preview.academic_year.name == "2024/2025"
    assert [c.name for c in preview.classes] == ["Class A", "Class B"]
    assert len(preview.classes) == summary.class_count
    assert sum(c.class_course_count for c in preview.classes) == summary.class_course_count


async def test_history_and_details_are_scoped(db_session, scheduling_data, other_institution):
    ours = await run_schedule(db_session, scheduling_data)
    theirs = await run_schedule(db_session, other_institution)
    service = ExamSchedulerService(db_session)

    page = await service.history(HistoryQuery(), scheduling_data["institution_id"])
    details = await service.details(ours.run_id, scheduling_data["institution_id"])

    assert [item["id"] for item in page["items"]] == [ours.run_id]
    assert {e["id"] for e in details["exams"]} == set(ours.exam_ids)
    with pytest.raises(NotFoundError):
        await service.details(theirs.run_id, scheduling_data["institution_id"])
