# examplan/services/exams/__init__.py
"""Exam module collaborators consumed by the scheduler."""

from .exam_service import ExamService, ExamCreateData
from .creation_gateway import (
    ExamCreationGateway,
    CreationOutcome,
    Created,
    Rejected,
    Fatal,
)

__all__ = [
    "ExamService",
    "ExamCreateData",
    "ExamCreationGateway",
    "CreationOutcome",
    "Created",
    "Rejected",
    "Fatal",
]
