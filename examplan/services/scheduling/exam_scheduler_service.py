# examplan/services/scheduling/exam_scheduler_service.py
"""
Batch exam scheduler.

Given an academic year, a semester, an exam type and a date window, the
service creates one exam of that type for every eligible class-course that
does not already have one. Exam dates are spread evenly across the window.
Each creation goes through the exam module, so its rules (roster, percentage
ceiling, one exam per type) still apply; rejected creations are counted as
conflicts and the batch carries on. Every invocation is recorded as a run
that can be listed and inspected later.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.config import settings
from ...core.exceptions import (
    InvalidSelectionError,
    NotFoundError,
    RunRecordingError,
)
from ...schemas.exam_scheduler import HistoryQuery, PreviewRequest, ScheduleRequest
from ..exams import (
    Created,
    ExamCreateData,
    ExamCreationGateway,
    ExamService,
    Fatal,
    Rejected,
)
from .candidate_repository import (
    CandidateRepository,
    SchedulerClass,
    SchedulerClassCourse,
)
from .date_distributor import distribute
from .duplicate_filter import DuplicateFilter
from .run_store import RunStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AcademicYearRef:
    id: UUID
    name: str
    start_date: date
    end_date: date


@dataclass(frozen=True)
class ExamTypeRef:
    id: UUID
    name: str


@dataclass(frozen=True)
class SchedulingContext:
    """Resolved, tenant-checked inputs of one invocation."""

    institution_id: UUID
    academic_year: AcademicYearRef
    semester_id: UUID
    faculty_id: Optional[UUID] = None
    class_ids: Optional[List[UUID]] = None
    exam_type: Optional[ExamTypeRef] = None
    scheduler_profile_id: Optional[UUID] = None


@dataclass
class BatchResult:
    created_ids: List[UUID] = field(default_factory=list)
    rejections: List[Rejected] = field(default_factory=list)

    @property
    def conflicts(self) -> int:
        return len(self.rejections)


@dataclass
class PreviewResult:
    academic_year: AcademicYearRef
    classes: List[SchedulerClass]


@dataclass
class RunSummary:
    created: int
    skipped: int
    duplicates: int
    conflicts: int
    class_count: int
    class_course_count: int
    exam_ids: List[UUID]
    exam_type: ExamTypeRef
    academic_year: AcademicYearRef
    run_id: Optional[UUID] = None
    persistence_error: Optional[str] = None


class ExamSchedulerService:
    """Orchestrates preview, batch scheduling and run history for one session."""

    def __init__(
        self,
        session: AsyncSession,
        candidates: Optional[CandidateRepository] = None,
        duplicates: Optional[DuplicateFilter] = None,
        exam_service: Optional[ExamService] = None,
        run_store: Optional[RunStore] = None,
        exam_gateway: Optional[ExamCreationGateway] = None,
    ):
        self.session = session
        self.candidates = candidates or CandidateRepository(session)
        self.duplicates = duplicates or DuplicateFilter(session)
        self.exam_service = exam_service or ExamService(session)
        self.run_store = run_store or RunStore(session)
        self._exam_gateway = exam_gateway

    def _gateway(self, institution_id: UUID) -> ExamCreationGateway:
        if self._exam_gateway is not None:
            return self._exam_gateway
        return ExamCreationGateway(self.exam_service, institution_id)

    # --- Context resolution ---

    async def _resolve_context(
        self,
        request: PreviewRequest,
        institution_id: UUID,
        scheduler_id: Optional[UUID] = None,
    ) -> SchedulingContext:
        academic_year = await self.candidates.find_academic_year(request.academic_year_id)
        if academic_year is None or academic_year.institution_id != institution_id:
            raise NotFoundError(
                "Academic year not found",
                entity_type="academic_year",
                entity_id=request.academic_year_id,
            )

        semester = await self.candidates.find_semester(request.semester_id)
        if semester is None:
            raise NotFoundError(
                "Semester not found", entity_type="semester", entity_id=request.semester_id
            )

        if request.faculty_id is not None:
            faculty = await self.candidates.find_faculty(request.faculty_id)
            if faculty is None or faculty.institution_id != institution_id:
                raise NotFoundError(
                    "Faculty not found", entity_type="faculty", entity_id=request.faculty_id
                )

        exam_type_ref = None
        exam_type_id = getattr(request, "exam_type_id", None)
        if exam_type_id is not None:
            exam_type = await self.candidates.find_exam_type(exam_type_id)
            if exam_type is None or exam_type.institution_id != institution_id:
                raise NotFoundError(
                    "Exam type not found", entity_type="exam_type", entity_id=exam_type_id
                )
            exam_type_ref = ExamTypeRef(id=exam_type.id, name=exam_type.name)

        profile_id = None
        if scheduler_id is not None:
            profile = await self.candidates.find_domain_user(scheduler_id)
            profile_id = profile.id if profile else None

        return SchedulingContext(
            institution_id=institution_id,
            academic_year=AcademicYearRef(
                id=academic_year.id,
                name=academic_year.name,
                start_date=academic_year.start_date,
                end_date=academic_year.end_date,
            ),
            semester_id=request.semester_id,
            faculty_id=request.faculty_id,
            class_ids=getattr(request, "class_ids", None),
            exam_type=exam_type_ref,
            scheduler_profile_id=profile_id,
        )

    async def _load_classes(self, context: SchedulingContext) -> List[SchedulerClass]:
        return await self.candidates.classes_for_scheduling(
            context.institution_id,
            context.academic_year.id,
            semester_id=context.semester_id,
            class_ids=context.class_ids,
            faculty_id=context.faculty_id,
        )

    # --- Public operations ---

    async def preview(self, request: PreviewRequest, institution_id: UUID) -> PreviewResult:
        """Classes that a run with the same selection would consider. Read-only."""
        context = await self._resolve_context(request, institution_id)
        classes = await self._load_classes(context)
        return PreviewResult(academic_year=context.academic_year, classes=classes)

    async def _create_batch(
        self,
        gateway: ExamCreationGateway,
        targets: List[SchedulerClassCourse],
        dates: List[datetime],
        context: SchedulingContext,
        percentage: Decimal,
        scheduler_id: Optional[UUID],
    ) -> BatchResult:
        result = BatchResult()
        for class_course, exam_date in zip(targets, dates):
            spec = ExamCreateData(
                name=f"{class_course.course_name} - {context.exam_type.name}",
                type=context.exam_type.name,
                date=exam_date,
                percentage=percentage,
                class_course_id=class_course.id,
            )
            outcome = await gateway.create(spec, scheduler_id)
            if isinstance(outcome, Created):
                result.created_ids.append(outcome.exam_id)
            elif isinstance(outcome, Rejected):
                result.rejections.append(outcome)
            elif isinstance(outcome, Fatal):
                logger.error(
                    f"Aborting schedule run after {len(result.created_ids)} exams: "
                    f"class course {outcome.class_course_id} failed"
                )
                raise outcome.error
        return result

    async def schedule(
        self,
        request: ScheduleRequest,
        scheduler_id: Optional[UUID],
        institution_id: UUID,
    ) -> RunSummary:
        """
        Create one exam per eligible class-course and record the run.

        Raises ``NotFoundError`` for unknown or foreign context ids and
        ``InvalidSelectionError`` when the selection has no classes or no
        class-courses. Per-exam rejections are counted as conflicts. Any other
        creation failure stops the batch and propagates; exams created before
        it remain. A failure while recording the run does not fail the call:
        it is reported through ``persistence_error``.
        """
        context = await self._resolve_context(request, institution_id, scheduler_id)

        classes = await self._load_classes(context)
        if not classes:
            raise InvalidSelectionError("No classes match the provided selection")
        class_ids = [cls.id for cls in classes]

        class_courses = await self.candidates.class_courses_for(class_ids)
        if not class_courses:
            raise InvalidSelectionError("Selected classes do not have assigned courses")

        existing = await self.duplicates.existing_exam_class_course_ids(
            [cc.id for cc in class_courses], context.exam_type.name, institution_id
        )
        targets, duplicates = DuplicateFilter.partition(class_courses, existing)
        dates = distribute(len(targets), request.date_start, request.date_end)

        logger.info(
            f"Scheduling '{context.exam_type.name}' for {len(targets)} class-courses "
            f"across {len(classes)} classes ({duplicates} already scheduled)"
        )

        gateway = self._gateway(institution_id)
        batch = await self._create_batch(
            gateway, targets, dates, context, request.percentage, scheduler_id
        )
        if batch.rejections:
            reasons = Counter(r.reason for r in batch.rejections)
            logger.warning(f"{batch.conflicts} exams rejected: {dict(reasons)}")

        created = len(batch.created_ids)
        summary = RunSummary(
            created=created,
            skipped=len(class_courses) - created,
            duplicates=duplicates,
            conflicts=batch.conflicts,
            class_count=len(classes),
            class_course_count=len(class_courses),
            exam_ids=list(batch.created_ids),
            exam_type=context.exam_type,
            academic_year=context.academic_year,
        )

        await self._record_run(gateway, summary, context, request, class_ids)
        logger.info(
            f"Schedule run {summary.run_id}: created={summary.created} "
            f"duplicates={summary.duplicates} conflicts={summary.conflicts}"
        )
        return summary

    async def _record_run(
        self,
        gateway: ExamCreationGateway,
        summary: RunSummary,
        context: SchedulingContext,
        request: ScheduleRequest,
        class_ids: List[UUID],
    ) -> None:
        try:
            run = await self.run_store.record(
                institution_id=context.institution_id,
                academic_year_id=context.academic_year.id,
                exam_type_id=context.exam_type.id,
                semester_id=context.semester_id,
                percentage=request.percentage,
                date_start=request.date_start,
                date_end=request.date_end,
                class_ids=class_ids,
                class_count=summary.class_count,
                class_course_count=summary.class_course_count,
                created_count=summary.created,
                skipped_count=summary.skipped,
                duplicate_count=summary.duplicates,
                conflict_count=summary.conflicts,
                scheduled_by=context.scheduler_profile_id,
            )
        except Exception as e:
            error = RunRecordingError(f"Failed to record exam scheduling run: {e}", cause=e)
            logger.error(str(error), exc_info=True)
            summary.persistence_error = error.message
            return

        summary.run_id = run.id
        try:
            await gateway.assign_run(summary.exam_ids, run.id)
        except Exception as e:
            error = RunRecordingError(
                f"Failed to link exams to scheduling run: {e}", run_id=run.id, cause=e
            )
            logger.error(str(error), exc_info=True)
            summary.persistence_error = error.message

    async def history(self, query: HistoryQuery, institution_id: UUID) -> Dict[str, Any]:
        """Cursor-paged runs of the caller's institution."""
        if query.institution_id is not None and query.institution_id != institution_id:
            return {"items": [], "next_cursor": None}

        limit = query.limit or settings.SCHEDULER_HISTORY_PAGE_SIZE
        limit = max(1, min(limit, settings.SCHEDULER_HISTORY_MAX_PAGE_SIZE))
        return await self.run_store.list_runs(
            institution_id,
            limit,
            academic_year_id=query.academic_year_id,
            exam_type_id=query.exam_type_id,
            cursor=query.cursor,
        )

    async def details(self, run_id: UUID, institution_id: UUID) -> Dict[str, Any]:
        details = await self.run_store.get_run_details(run_id, institution_id)
        if details is None:
            raise NotFoundError(
                "Schedule run not found", entity_type="exam_schedule_run", entity_id=run_id
            )
        return details
