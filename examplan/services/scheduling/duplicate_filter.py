# examplan/services/scheduling/duplicate_filter.py

import logging
from typing import Iterable, List, Sequence, Set, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models import Exam
from .candidate_repository import SchedulerClassCourse

logger = logging.getLogger(__name__)


class DuplicateFilter:
    """Finds class-courses that already carry an exam of a given type."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def existing_exam_class_course_ids(
        self,
        class_course_ids: Sequence[UUID],
        exam_type_name: str,
        institution_id: UUID,
    ) -> Set[UUID]:
        # Matched by type name: same-named exam types share a slot
        if not class_course_ids:
            return set()

        stmt = select(Exam.class_course_id).where(
            Exam.class_course_id.in_(list(class_course_ids)),
            Exam.type == exam_type_name,
            Exam.institution_id == institution_id,
        )
        result = await self.session.execute(stmt)
        existing = set(result.scalars().all())
        logger.debug(
            f"{len(existing)}/{len(class_course_ids)} class-courses already have a '{exam_type_name}' exam"
        )
        return existing

    @staticmethod
    def partition(
        class_courses: Iterable[SchedulerClassCourse], existing: Set[UUID]
    ) -> Tuple[List[SchedulerClassCourse], int]:
        """Split candidates into creation targets and a duplicate count, keeping order."""
        targets: List[SchedulerClassCourse] = []
        duplicates = 0
        for class_course in class_courses:
            if class_course.id in existing:
                duplicates += 1
            else:
                targets.append(class_course)
        return targets, duplicates
