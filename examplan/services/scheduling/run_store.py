# examplan/services/scheduling/run_store.py
"""
Persistence for scheduling runs: recording a finished run, the paged run
history and the per-run exam listing.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models import (
    AcademicYear,
    ClassCourse,
    Course,
    Exam,
    ExamScheduleRun,
    ExamType,
    Institution,
    SchoolClass,
)

logger = logging.getLogger(__name__)


class RunStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def record(
        self,
        *,
        institution_id: UUID,
        academic_year_id: UUID,
        exam_type_id: UUID,
        semester_id: Optional[UUID],
        percentage: Decimal,
        date_start: datetime,
        date_end: datetime,
        class_ids: Sequence[UUID],
        class_count: int,
        class_course_count: int,
        created_count: int,
        skipped_count: int,
        duplicate_count: int,
        conflict_count: int,
        scheduled_by: Optional[UUID],
    ) -> ExamScheduleRun:
        """Insert and commit one run row."""
        run = ExamScheduleRun(
            institution_id=institution_id,
            academic_year_id=academic_year_id,
            exam_type_id=exam_type_id,
            semester_id=semester_id,
            percentage=percentage,
            date_start=date_start,
            date_end=date_end,
            class_ids=[str(class_id) for class_id in class_ids],
            class_count=class_count,
            class_course_count=class_course_count,
            created_count=created_count,
            skipped_count=skipped_count,
            duplicate_count=duplicate_count,
            conflict_count=conflict_count,
            scheduled_by=scheduled_by,
        )
        try:
            self.session.add(run)
            await self.session.commit()
            await self.session.refresh(run)
        except Exception:
            await self.session.rollback()
            raise
        logger.info(f"Recorded schedule run {run.id} for institution {institution_id}")
        return run

    def _run_columns(self):
        return (
            ExamScheduleRun,
            Institution.name.label("institution_name"),
            AcademicYear.name.label("academic_year_name"),
            ExamType.name.label("exam_type_name"),
        )

    def _runs_select(self):
        return (
            select(*self._run_columns())
            .outerjoin(Institution, Institution.id == ExamScheduleRun.institution_id)
            .outerjoin(AcademicYear, AcademicYear.id == ExamScheduleRun.academic_year_id)
            .outerjoin(ExamType, ExamType.id == ExamScheduleRun.exam_type_id)
        )

    @staticmethod
    def _run_to_dict(row) -> Dict[str, Any]:
        run: ExamScheduleRun = row.ExamScheduleRun
        return {
            "id": run.id,
            "institution_id": run.institution_id,
            "institution_name": row.institution_name,
            "academic_year_id": run.academic_year_id,
            "academic_year_name": row.academic_year_name,
            "exam_type_id": run.exam_type_id,
            "exam_type_name": row.exam_type_name,
            "semester_id": run.semester_id,
            "percentage": run.percentage,
            "date_start": run.date_start,
            "date_end": run.date_end,
            "class_ids": list(run.class_ids or []),
            "class_count": run.class_count,
            "class_course_count": run.class_course_count,
            "created_count": run.created_count,
            "skipped_count": run.skipped_count,
            "duplicate_count": run.duplicate_count,
            "conflict_count": run.conflict_count,
            "scheduled_by": run.scheduled_by,
            "created_at": run.created_at,
        }

    async def list_runs(
        self,
        institution_id: UUID,
        limit: int,
        academic_year_id: Optional[UUID] = None,
        exam_type_id: Optional[UUID] = None,
        cursor: Optional[UUID] = None,
    ) -> Dict[str, Any]:
        """
        One page of runs for the institution in ascending id order.

        ``next_cursor`` is the last id of a full page, otherwise None.
        """
        stmt = self._runs_select().where(ExamScheduleRun.institution_id == institution_id)
        if academic_year_id is not None:
            stmt = stmt.where(ExamScheduleRun.academic_year_id == academic_year_id)
        if exam_type_id is not None:
            stmt = stmt.where(ExamScheduleRun.exam_type_id == exam_type_id)
        if cursor is not None:
            stmt = stmt.where(ExamScheduleRun.id > cursor)
        stmt = stmt.order_by(ExamScheduleRun.id).limit(limit)

        rows = (await self.session.execute(stmt)).all()
        items = [self._run_to_dict(row) for row in rows]
        next_cursor = items[-1]["id"] if len(items) == limit else None
        return {"items": items, "next_cursor": next_cursor}

    async def get_run(self, run_id: UUID, institution_id: UUID) -> Optional[Dict[str, Any]]:
        stmt = self._runs_select().where(
            ExamScheduleRun.id == run_id,
            ExamScheduleRun.institution_id == institution_id,
        )
        row = (await self.session.execute(stmt)).first()
        return self._run_to_dict(row) if row else None

    async def exams_for_run(self, run_id: UUID) -> List[Dict[str, Any]]:
        stmt = (
            select(
                Exam.id,
                Exam.name,
                Exam.type,
                Exam.date,
                Exam.status,
                Exam.is_locked,
                SchoolClass.id.label("class_id"),
                SchoolClass.name.label("class_name"),
                Course.id.label("course_id"),
                Course.name.label("course_name"),
            )
            .outerjoin(ClassCourse, ClassCourse.id == Exam.class_course_id)
            .outerjoin(SchoolClass, SchoolClass.id == ClassCourse.class_id)
            .outerjoin(Course, Course.id == ClassCourse.course_id)
            .where(Exam.schedule_run_id == run_id)
            .order_by(Exam.date, Exam.id)
        )
        rows = (await self.session.execute(stmt)).all()
        return [dict(row._mapping) for row in rows]

    async def get_run_details(
        self, run_id: UUID, institution_id: UUID
    ) -> Optional[Dict[str, Any]]:
        """The run and its linked exams, or None when missing or foreign."""
        run = await self.get_run(run_id, institution_id)
        if run is None:
            return None
        return {"run": run, "exams": await self.exams_for_run(run_id)}
