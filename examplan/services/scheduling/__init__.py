# examplan/services/scheduling/__init__.py

from .candidate_repository import CandidateRepository, SchedulerClass, SchedulerClassCourse
from .date_distributor import distribute
from .duplicate_filter import DuplicateFilter
from .run_store import RunStore
from .exam_scheduler_service import (
    ExamSchedulerService,
    SchedulingContext,
    BatchResult,
    PreviewResult,
    RunSummary,
    AcademicYearRef,
    ExamTypeRef,
)

__all__ = [
    "CandidateRepository",
    "SchedulerClass",
    "SchedulerClassCourse",
    "distribute",
    "DuplicateFilter",
    "RunStore",
    "ExamSchedulerService",
    "SchedulingContext",
    "BatchResult",
    "PreviewResult",
    "RunSummary",
    "AcademicYearRef",
    "ExamTypeRef",
]
