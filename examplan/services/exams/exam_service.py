# examplan/services/exams/exam_service.py
"""
Exam creation rules owned by the exam module: tenant checks, roster
requirement, one exam per type per class-course and the percentage ceiling.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.config import settings
from ...core.exceptions import CreationRejectedError, NotFoundError
from ...models import (
    ClassCourse,
    DomainUser,
    Exam,
    ExamStatusEnum,
    ROSTER_STATUSES,
    StudentCourseEnrollment,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExamCreateData:
    name: str
    type: str
    date: datetime
    percentage: Decimal
    class_course_id: UUID


class ExamService:
    """Creates and links exam records within one institution."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _resolve_domain_user_id(self, profile_id: Optional[UUID]) -> Optional[UUID]:
        if profile_id is None:
            return None
        profile = await self.session.get(DomainUser, profile_id)
        return profile.id if profile else None

    async def _require_class_course(
        self, class_course_id: UUID, institution_id: UUID
    ) -> ClassCourse:
        stmt = select(ClassCourse).where(
            ClassCourse.id == class_course_id,
            ClassCourse.institution_id == institution_id,
        )
        class_course = (await self.session.execute(stmt)).scalar_one_or_none()
        if class_course is None:
            raise NotFoundError(
                "Class course not found",
                entity_type="class_course",
                entity_id=class_course_id,
            )
        return class_course

    async def count_roster(self, class_course_id: UUID) -> int:
        stmt = select(func.count()).where(
            StudentCourseEnrollment.class_course_id == class_course_id,
            StudentCourseEnrollment.status.in_(ROSTER_STATUSES),
        )
        return int((await self.session.execute(stmt)).scalar_one())

    async def _ensure_roster(self, class_course_id: UUID) -> None:
        if await self.count_roster(class_course_id) == 0:
            raise CreationRejectedError(
                "No active enrollments exist for this class course",
                class_course_id=class_course_id,
                reason="empty_roster",
            )

    async def _percentage_total(self, class_course_id: UUID) -> Decimal:
        stmt = select(func.coalesce(func.sum(Exam.percentage), 0)).where(
            Exam.class_course_id == class_course_id
        )
        total = (await self.session.execute(stmt)).scalar_one()
        return Decimal(str(total))

    async def _ensure_type_slot_free(self, class_course_id: UUID, exam_type: str) -> None:
        stmt = select(Exam.id).where(
            Exam.class_course_id == class_course_id, Exam.type == exam_type
        )
        if (await self.session.execute(stmt.limit(1))).first() is not None:
            raise CreationRejectedError(
                f"A '{exam_type}' exam already exists for this class course",
                class_course_id=class_course_id,
                reason="duplicate_type",
            )

    async def create_exam(
        self,
        data: ExamCreateData,
        scheduler_id: Optional[UUID],
        institution_id: UUID,
    ) -> Exam:
        """
        Create one exam for a class-course and commit it.

        Raises ``NotFoundError`` when the class-course is not in the
        institution and ``CreationRejectedError`` when the class-course has no
        roster, already has an exam of this type, or the percentages would
        exceed the ceiling. Nothing is written on rejection.
        """
        resolved_scheduler = await self._resolve_domain_user_id(scheduler_id)
        class_course = await self._require_class_course(
            data.class_course_id, institution_id
        )
        await self._ensure_roster(class_course.id)

        await self._ensure_type_slot_free(class_course.id, data.type)
        total = await self._percentage_total(class_course.id)
        percentage = Decimal(str(data.percentage))
        if total + percentage > settings.EXAM_MAX_PERCENTAGE:
            raise CreationRejectedError(
                f"Percentage exceeds {settings.EXAM_MAX_PERCENTAGE}",
                class_course_id=class_course.id,
                reason="percentage_overflow",
                details={"current_total": str(total), "requested": str(percentage)},
            )

        exam = Exam(
            institution_id=class_course.institution_id,
            class_course_id=class_course.id,
            name=data.name,
            type=data.type,
            date=data.date,
            percentage=percentage,
            status=(
                ExamStatusEnum.scheduled.value
                if scheduler_id
                else ExamStatusEnum.draft.value
            ),
            is_locked=False,
            scheduled_by=resolved_scheduler,
            scheduled_at=(
                datetime.now(timezone.utc) if scheduler_id else None
            ),
        )
        try:
            self.session.add(exam)
            await self.session.flush()
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            # A concurrent run took the slot between the check and the insert
            raise CreationRejectedError(
                f"A '{data.type}' exam already exists for this class course",
                class_course_id=class_course.id,
                reason="duplicate_type",
                cause=e,
            )
        except Exception:
            await self.session.rollback()
            raise

        logger.debug(f"Created exam {exam.id} for class course {class_course.id}")
        return exam

    async def assign_schedule_run(
        self, exam_ids: Sequence[UUID], run_id: UUID, institution_id: UUID
    ) -> None:
        """Point the given exams at the run that created them."""
        if not exam_ids:
            return
        try:
            await self.session.execute(
                update(Exam)
                .where(Exam.id.in_(list(exam_ids)), Exam.institution_id == institution_id)
                .values(schedule_run_id=run_id)
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
