# examplan/models/__init__.py

from .base import Base
from .academic import (
    Institution,
    Faculty,
    Program,
    Semester,
    AcademicYear,
    Course,
    SchoolClass,
    ClassCourse,
    Student,
    StudentCourseEnrollment,
    EnrollmentStatusEnum,
    ROSTER_STATUSES,
)
from .users import User, DomainUser
from .exams import Exam, ExamType, ExamScheduleRun, ExamStatusEnum

# Export all models for easy import
__all__ = [
    # Base
    "Base",
    # Academic models
    "Institution",
    "Faculty",
    "Program",
    "Semester",
    "AcademicYear",
    "Course",
    "SchoolClass",
    "ClassCourse",
    "Student",
    "StudentCourseEnrollment",
    "EnrollmentStatusEnum",
    "ROSTER_STATUSES",
    # User models
    "User",
    "DomainUser",
    # Exam models
    "Exam",
    "ExamType",
    "ExamScheduleRun",
    "ExamStatusEnum",
]
