# examplan/services/exams/creation_gateway.py
"""
Adapter between the batch scheduler and the exam module.

Every creation attempt is reported as a ``CreationOutcome`` so the scheduler
can fold over results instead of branching on exceptions.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union
from uuid import UUID

from ...core.exceptions import CreationRejectedError
from .exam_service import ExamCreateData, ExamService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Created:
    exam_id: UUID


@dataclass(frozen=True)
class Rejected:
    class_course_id: UUID
    reason: str
    message: str


@dataclass(frozen=True)
class Fatal:
    class_course_id: UUID
    error: BaseException


CreationOutcome = Union[Created, Rejected, Fatal]


class ExamCreationGateway:
    def __init__(self, exam_service: ExamService, institution_id: UUID):
        self.exam_service = exam_service
        self.institution_id = institution_id

    async def create(
        self, spec: ExamCreateData, actor_id: Optional[UUID]
    ) -> CreationOutcome:
        try:
            exam = await self.exam_service.create_exam(
                spec, actor_id, self.institution_id
            )
        except CreationRejectedError as e:
            logger.info(
                f"Exam creation rejected for class course {spec.class_course_id}: {e.message}"
            )
            return Rejected(
                class_course_id=spec.class_course_id, reason=e.reason, message=e.message
            )
        except Exception as e:
            logger.error(
                f"Exam creation failed for class course {spec.class_course_id}: {e}",
                exc_info=True,
            )
            return Fatal(class_course_id=spec.class_course_id, error=e)
        return Created(exam_id=exam.id)

    async def assign_run(self, exam_ids: Sequence[UUID], run_id: UUID) -> None:
        await self.exam_service.assign_schedule_run(exam_ids, run_id, self.institution_id)
