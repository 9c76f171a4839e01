# examplan/tests/unit/test_creation_gateway.py

import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import uuid4
from datetime import datetime
from decimal import Decimal

from sqlalchemy.exc import OperationalError

from examplan.core.exceptions import CreationRejectedError, NotFoundError
from examplan.services.exams import (
    Created,
    ExamCreateData,
    ExamCreationGateway,
    ExamService,
    Fatal,
    Rejected,
)

pytestmark = pytest.mark.asyncio

INSTITUTION_ID = uuid4()


@pytest.fixture
def exam_service():
    return AsyncMock(spec=ExamService)


@pytest.fixture
def gateway(exam_service):
    return ExamCreationGateway(exam_service, INSTITUTION_ID)


@pytest.fixture
def spec():
    return ExamCreateData(
        name="Algebra - Midterm",
        type="Midterm",
        date=datetime(2025, 1, 1),
        percentage=Decimal("40"),
        class_course_id=uuid4(),
    )


async def test_success_is_created(gateway, exam_service, spec):
    exam_id = uuid4()
    actor = uuid4()
    exam_service.create_exam.return_value = SimpleNamespace(id=exam_id)

    outcome = await gateway.create(spec, actor)

    assert outcome == Created(exam_id)
    exam_service.create_exam.assert_awaited_once_with(spec, actor, INSTITUTION_ID)


async def test_rule_violation_is_rejected(gateway, exam_service, spec):
    exam_service.create_exam.side_effect = CreationRejectedError(
        "No active enrollments exist for this class course",
        class_course_id=spec.class_course_id,
        reason="empty_roster",
    )

    outcome = await gateway.create(spec, None)

    assert isinstance(outcome, Rejected)
    assert outcome.reason == "empty_roster"
    assert outcome.class_course_id == spec.class_course_id


async def test_store_failure_is_fatal(gateway, exam_service, spec):
    error = OperationalError("INSERT", {}, Exception("server closed the connection"))
    exam_service.create_exam.side_effect = error

    outcome = await gateway.create(spec, None)

    assert isinstance(outcome, Fatal)
    assert outcome.error is error


async def test_missing_class_course_is_fatal(gateway, exam_service, spec):
    exam_service.create_exam.side_effect = NotFoundError("Class course not found")

    outcome = await gateway.create(spec, None)

    assert isinstance(outcome, Fatal)


async def test_assign_run_delegates_with_institution(gateway, exam_service):
    exam_ids = [uuid4(), uuid4()]
    run_id = uuid4()

    await gateway.assign_run(exam_ids, run_id)

    exam_service.assign_schedule_run.assert_awaited_once_with(
        exam_ids, run_id, INSTITUTION_ID
    )
