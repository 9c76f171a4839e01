# examplan/models/exams.py

import uuid
import enum
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, CreatedAtMixin, JSONType

if TYPE_CHECKING:
    from .academic import ClassCourse


class ExamStatusEnum(str, enum.Enum):
    draft = "draft"
    scheduled = "scheduled"
    submitted = "submitted"
    approved = "approved"
    rejected = "rejected"


class ExamType(Base, CreatedAtMixin):
    """Named category of assessment (e.g. Midterm); its name labels the exam."""

    __tablename__ = "exam_types"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    institution_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("institutions.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        UniqueConstraint("institution_id", "name", name="uq_exam_types_name_institution"),
    )


class ExamScheduleRun(Base, CreatedAtMixin):
    """One invocation of the batch scheduler with its parameters and outcome."""

    __tablename__ = "exam_schedule_runs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    institution_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("institutions.id", ondelete="CASCADE"), nullable=False
    )
    academic_year_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("academic_years.id", ondelete="RESTRICT"), nullable=False
    )
    exam_type_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("exam_types.id", ondelete="RESTRICT"), nullable=False
    )
    semester_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("semesters.id", ondelete="SET NULL")
    )
    percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    date_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    date_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    class_ids: Mapped[list] = mapped_column(JSONType, nullable=False)
    class_count: Mapped[int] = mapped_column(Integer, nullable=False)
    class_course_count: Mapped[int] = mapped_column(Integer, nullable=False)
    created_count: Mapped[int] = mapped_column(Integer, nullable=False)
    skipped_count: Mapped[int] = mapped_column(Integer, nullable=False)
    duplicate_count: Mapped[int] = mapped_column(Integer, nullable=False)
    conflict_count: Mapped[int] = mapped_column(Integer, nullable=False)
    scheduled_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("domain_users.id", ondelete="SET NULL")
    )

    exams: Mapped[List["Exam"]] = relationship(back_populates="schedule_run")
    __table_args__ = (
        Index("idx_exam_schedule_runs_institution", "institution_id"),
        Index("idx_exam_schedule_runs_year", "academic_year_id"),
        Index("idx_exam_schedule_runs_type", "exam_type_id"),
    )


class Exam(Base, CreatedAtMixin):
    """Exam planned for a class-course, with workflow metadata."""

    __tablename__ = "exams"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    institution_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("institutions.id", ondelete="CASCADE"), nullable=False
    )
    class_course_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("class_courses.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    type: Mapped[str] = mapped_column(String, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=ExamStatusEnum.draft.value
    )
    is_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    scheduled_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("domain_users.id", ondelete="SET NULL")
    )
    scheduled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    schedule_run_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("exam_schedule_runs.id", ondelete="SET NULL")
    )

    class_course: Mapped["ClassCourse"] = relationship(back_populates="exams")
    schedule_run: Mapped[Optional["ExamScheduleRun"]] = relationship(
        back_populates="exams"
    )
    __table_args__ = (
        CheckConstraint(
            "percentage >= 0 AND percentage <= 100", name="chk_exams_percentage"
        ),
        # One exam per class-course per type name; concurrent runs rely on it
        UniqueConstraint("class_course_id", "type", name="uq_exams_class_course_type"),
        Index("idx_exams_institution_id", "institution_id"),
        Index("idx_exams_schedule_run_id", "schedule_run_id"),
        Index("idx_exams_date", "date"),
    )
