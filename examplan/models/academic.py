# examplan/models/academic.py

import uuid
import enum

from datetime import date
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from .base import Base, CreatedAtMixin

if TYPE_CHECKING:
    from .exams import Exam


class EnrollmentStatusEnum(str, enum.Enum):
    planned = "planned"
    active = "active"
    completed = "completed"
    failed = "failed"
    withdrawn = "withdrawn"


# Enrollments that count towards a class-course roster
ROSTER_STATUSES = (EnrollmentStatusEnum.planned.value, EnrollmentStatusEnum.active.value)


class Institution(Base, CreatedAtMixin):
    __tablename__ = "institutions"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)

    faculties: Mapped[List["Faculty"]] = relationship(back_populates="institution")
    academic_years: Mapped[List["AcademicYear"]] = relationship(
        back_populates="institution"
    )


class Faculty(Base, CreatedAtMixin):
    __tablename__ = "faculties"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    institution_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("institutions.id", ondelete="CASCADE"), nullable=False
    )
    code: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)

    institution: Mapped["Institution"] = relationship(back_populates="faculties")
    programs: Mapped[List["Program"]] = relationship(back_populates="faculty")
    __table_args__ = (
        UniqueConstraint("institution_id", "code", name="uq_faculties_institution_code"),
    )


class Program(Base, CreatedAtMixin):
    __tablename__ = "programs"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    institution_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("institutions.id", ondelete="CASCADE"), nullable=False
    )
    faculty_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("faculties.id", ondelete="RESTRICT"), nullable=False
    )
    code: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)

    faculty: Mapped["Faculty"] = relationship(back_populates="programs")
    classes: Mapped[List["SchoolClass"]] = relationship(back_populates="program")
    courses: Mapped[List["Course"]] = relationship(back_populates="program")
    __table_args__ = (
        Index("idx_programs_institution_id", "institution_id"),
        Index("idx_programs_faculty_id", "faculty_id"),
    )


class Semester(Base):
    __tablename__ = "semesters"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class AcademicYear(Base, CreatedAtMixin):
    __tablename__ = "academic_years"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    institution_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("institutions.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    institution: Mapped["Institution"] = relationship(back_populates="academic_years")
    __table_args__ = (
        UniqueConstraint(
            "institution_id", "name", name="uq_academic_years_institution_name"
        ),
        Index("idx_academic_years_institution", "institution_id"),
    )


class Course(Base, CreatedAtMixin):
    __tablename__ = "courses"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    program_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("programs.id", ondelete="CASCADE"), nullable=False
    )
    code: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)

    program: Mapped["Program"] = relationship(back_populates="courses")
    __table_args__ = (
        UniqueConstraint("program_id", "code", name="uq_courses_code_program"),
    )


class SchoolClass(Base, CreatedAtMixin):
    """A cohort of students following a program during one academic year."""

    __tablename__ = "classes"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    institution_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("institutions.id", ondelete="CASCADE"), nullable=False
    )
    program_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("programs.id", ondelete="CASCADE"), nullable=False
    )
    academic_year_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("academic_years.id", ondelete="RESTRICT"), nullable=False
    )
    semester_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("semesters.id", ondelete="SET NULL")
    )
    code: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)

    program: Mapped["Program"] = relationship(back_populates="classes")
    class_courses: Mapped[List["ClassCourse"]] = relationship(
        back_populates="school_class", cascade="all, delete-orphan"
    )
    __table_args__ = (
        Index("idx_classes_institution_year", "institution_id", "academic_year_id"),
    )


class ClassCourse(Base, CreatedAtMixin):
    """Pairing of a class with a course it takes; the unit exams are scheduled for."""

    __tablename__ = "class_courses"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    institution_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("institutions.id", ondelete="CASCADE"), nullable=False
    )
    class_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False
    )
    course_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False
    )
    semester_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("semesters.id", ondelete="SET NULL")
    )

    school_class: Mapped["SchoolClass"] = relationship(back_populates="class_courses")
    course: Mapped["Course"] = relationship()
    exams: Mapped[List["Exam"]] = relationship(back_populates="class_course")
    enrollments: Mapped[List["StudentCourseEnrollment"]] = relationship(
        back_populates="class_course"
    )
    __table_args__ = (
        UniqueConstraint("class_id", "course_id", name="uq_class_courses"),
        Index("idx_class_courses_institution_id", "institution_id"),
    )


class Student(Base, CreatedAtMixin):
    __tablename__ = "students"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    institution_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("institutions.id", ondelete="CASCADE"), nullable=False
    )
    class_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("classes.id", ondelete="RESTRICT"), nullable=False
    )
    registration_number: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)


class StudentCourseEnrollment(Base, CreatedAtMixin):
    __tablename__ = "student_course_enrollments"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False
    )
    class_course_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("class_courses.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=EnrollmentStatusEnum.planned.value
    )

    class_course: Mapped["ClassCourse"] = relationship(back_populates="enrollments")
    student: Mapped[Optional["Student"]] = relationship()
    __table_args__ = (
        UniqueConstraint(
            "student_id", "class_course_id", name="uq_student_course_enrollments"
        ),
        Index("idx_student_course_enrollments_class_course", "class_course_id"),
    )
