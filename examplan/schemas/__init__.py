# examplan/schemas/__init__.py

from .exam_scheduler import (
    PreviewRequest,
    ScheduleRequest,
    HistoryQuery,
    AcademicYearSummary,
    ExamTypeSummary,
    SchedulerClassRead,
    PreviewResponse,
    RunSummaryResponse,
    ScheduleRunRead,
    ScheduledExamRead,
    RunHistoryResponse,
    RunDetailsResponse,
)

__all__ = [
    "PreviewRequest",
    "ScheduleRequest",
    "HistoryQuery",
    "AcademicYearSummary",
    "ExamTypeSummary",
    "SchedulerClassRead",
    "PreviewResponse",
    "RunSummaryResponse",
    "ScheduleRunRead",
    "ScheduledExamRead",
    "RunHistoryResponse",
    "RunDetailsResponse",
]
