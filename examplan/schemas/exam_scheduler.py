# examplan/schemas/exam_scheduler.py
"""Pydantic v2 schemas for the automated exam scheduler."""

from __future__ import annotations
from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import List, Optional
from uuid import UUID
from datetime import date, datetime, timezone
from decimal import Decimal

MODEL_CONFIG = ConfigDict(from_attributes=True)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# --- Requests ---


class PreviewRequest(BaseModel):
    # Filled from the authenticated user when omitted
    institution_id: Optional[UUID] = None
    academic_year_id: UUID
    semester_id: UUID
    faculty_id: Optional[UUID] = None


class ScheduleRequest(PreviewRequest):
    exam_type_id: UUID
    percentage: Decimal = Field(ge=1, le=100)
    date_start: datetime
    date_end: datetime
    class_ids: Optional[List[UUID]] = None

    @model_validator(mode="after")
    def check_date_window(self) -> "ScheduleRequest":
        start_aware = self.date_start.tzinfo is not None
        if start_aware != (self.date_end.tzinfo is not None):
            raise ValueError(
                "date_start and date_end must both carry a UTC offset or neither"
            )
        # Naive bounds are read as UTC
        self.date_start = _as_utc(self.date_start)
        self.date_end = _as_utc(self.date_end)
        if self.date_end < self.date_start:
            raise ValueError("End date must be after start date")
        return self


class HistoryQuery(BaseModel):
    institution_id: Optional[UUID] = None
    academic_year_id: Optional[UUID] = None
    exam_type_id: Optional[UUID] = None
    cursor: Optional[UUID] = None
    limit: Optional[int] = Field(default=None, ge=1, le=200)


# --- Responses ---


class AcademicYearSummary(BaseModel):
    model_config = MODEL_CONFIG

    id: UUID
    name: str
    start_date: date
    end_date: date


class ExamTypeSummary(BaseModel):
    model_config = MODEL_CONFIG

    id: UUID
    name: str


class SchedulerClassRead(BaseModel):
    model_config = MODEL_CONFIG

    id: UUID
    name: str
    program_id: UUID
    program_name: str
    class_course_count: int


class PreviewResponse(BaseModel):
    model_config = MODEL_CONFIG

    academic_year: AcademicYearSummary
    classes: List[SchedulerClassRead]


class RunSummaryResponse(BaseModel):
    model_config = MODEL_CONFIG

    created: int
    skipped: int
    duplicates: int
    conflicts: int
    class_count: int
    class_course_count: int
    exam_ids: List[UUID]
    exam_type: ExamTypeSummary
    academic_year: AcademicYearSummary
    run_id: Optional[UUID] = None
    persistence_error: Optional[str] = None


class ScheduleRunRead(BaseModel):
    model_config = MODEL_CONFIG

    id: UUID
    institution_id: UUID
    institution_name: Optional[str] = None
    academic_year_id: UUID
    academic_year_name: Optional[str] = None
    exam_type_id: UUID
    exam_type_name: Optional[str] = None
    semester_id: Optional[UUID] = None
    percentage: Decimal
    date_start: datetime
    date_end: datetime
    class_ids: List[UUID]
    class_count: int
    class_course_count: int
    created_count: int
    skipped_count: int
    duplicate_count: int
    conflict_count: int
    scheduled_by: Optional[UUID] = None
    created_at: datetime


class ScheduledExamRead(BaseModel):
    model_config = MODEL_CONFIG

    id: UUID
    name: str
    type: str
    date: datetime
    status: str
    is_locked: bool
    class_id: Optional[UUID] = None
    class_name: Optional[str] = None
    course_id: Optional[UUID] = None
    course_name: Optional[str] = None


class RunHistoryResponse(BaseModel):
    items: List[ScheduleRunRead]
    next_cursor: Optional[UUID] = None


class RunDetailsResponse(BaseModel):
    run: ScheduleRunRead
    exams: List[ScheduledExamRead]
