# examplan/services/scheduling/candidate_repository.py
"""
Read-only queries that discover which classes and class-courses a scheduling
run can target, plus the finders used to resolve the run context.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models import (
    AcademicYear,
    ClassCourse,
    Course,
    DomainUser,
    ExamType,
    Faculty,
    Program,
    SchoolClass,
    Semester,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchedulerClass:
    id: UUID
    name: str
    program_id: UUID
    program_name: str
    class_course_count: int


@dataclass(frozen=True)
class SchedulerClassCourse:
    id: UUID
    class_id: UUID
    course_id: UUID
    course_name: str


class CandidateRepository:
    """Loads scheduling candidates for one institution."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # --- Context finders ---

    async def find_academic_year(self, academic_year_id: UUID) -> Optional[AcademicYear]:
        return await self.session.get(AcademicYear, academic_year_id)

    async def find_exam_type(self, exam_type_id: UUID) -> Optional[ExamType]:
        return await self.session.get(ExamType, exam_type_id)

    async def find_faculty(self, faculty_id: UUID) -> Optional[Faculty]:
        return await self.session.get(Faculty, faculty_id)

    async def find_semester(self, semester_id: UUID) -> Optional[Semester]:
        return await self.session.get(Semester, semester_id)

    async def find_domain_user(self, profile_id: UUID) -> Optional[DomainUser]:
        return await self.session.get(DomainUser, profile_id)

    # --- Candidates ---

    async def classes_for_scheduling(
        self,
        institution_id: UUID,
        academic_year_id: UUID,
        semester_id: Optional[UUID] = None,
        class_ids: Optional[Sequence[UUID]] = None,
        faculty_id: Optional[UUID] = None,
    ) -> List[SchedulerClass]:
        """
        Classes under the institution's programs for the academic year, each
        annotated with its class-course count. Ordered by name.
        """
        program_stmt = select(Program.id, Program.name).where(
            Program.institution_id == institution_id
        )
        if faculty_id is not None:
            program_stmt = program_stmt.where(Program.faculty_id == faculty_id)
        programs = (await self.session.execute(program_stmt)).all()
        if not programs:
            logger.debug(f"No programs found for institution {institution_id}")
            return []
        program_names: Dict[UUID, str] = {row.id: row.name for row in programs}

        stmt = select(SchoolClass.id, SchoolClass.name, SchoolClass.program_id).where(
            SchoolClass.institution_id == institution_id,
            SchoolClass.academic_year_id == academic_year_id,
            SchoolClass.program_id.in_(list(program_names)),
        )
        if semester_id is not None:
            stmt = stmt.where(SchoolClass.semester_id == semester_id)
        if class_ids:
            stmt = stmt.where(SchoolClass.id.in_(list(class_ids)))
        stmt = stmt.order_by(SchoolClass.name, SchoolClass.id)

        classes = (await self.session.execute(stmt)).all()
        if not classes:
            return []

        count_stmt = (
            select(ClassCourse.class_id, func.count().label("total"))
            .where(ClassCourse.class_id.in_([row.id for row in classes]))
            .group_by(ClassCourse.class_id)
        )
        counts = {
            row.class_id: int(row.total)
            for row in (await self.session.execute(count_stmt)).all()
        }

        return [
            SchedulerClass(
                id=row.id,
                name=row.name,
                program_id=row.program_id,
                program_name=program_names.get(row.program_id, ""),
                class_course_count=counts.get(row.id, 0),
            )
            for row in classes
        ]

    async def class_courses_for(
        self, class_ids: Sequence[UUID]
    ) -> List[SchedulerClassCourse]:
        """Flat list of class-courses for the classes, ordered by (class, course name)."""
        if not class_ids:
            return []

        stmt = (
            select(
                ClassCourse.id,
                ClassCourse.class_id,
                ClassCourse.course_id,
                Course.name.label("course_name"),
            )
            .join(Course, Course.id == ClassCourse.course_id)
            .where(ClassCourse.class_id.in_(list(class_ids)))
            .order_by(ClassCourse.class_id, Course.name, ClassCourse.id)
        )
        rows = (await self.session.execute(stmt)).all()
        return [
            SchedulerClassCourse(
                id=row.id,
                class_id=row.class_id,
                course_id=row.course_id,
                course_name=row.course_name,
            )
            for row in rows
        ]
