# examplan/core/exceptions.py
"""Application-level exceptions used across services.

Every exception carries an explicit ``code`` and ``status_code`` so routers
and the global exception handler can translate it without inspecting the
message. Exceptions are serializable via ``to_dict`` for API responses and
logs.
"""
from __future__ import annotations

from typing import Optional, Any, Dict
from datetime import datetime, timezone


class AppError(Exception):
    """Base application exception with structured metadata.

    Attributes
    ----------
    message
        Human readable message.
    code
        Machine friendly error code (snake_case).
    status_code
        Suggested HTTP status code for API responses.
    details
        Arbitrary extra data useful for debugging or UX.
    timestamp
        UTC ISO timestamp when the exception was created.
    cause
        Optional underlying exception instance.
    context
        Optional lightweight context dict (ids, phase names, counts).
    """

    code: str = "app_error"
    status_code: int = 500

    def __init__(
        self,
        message: str = "An application error occurred",
        *,
        details: Optional[Any] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        self.cause = cause
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def __str__(self) -> str:
        base = f"{self.__class__.__name__}({self.code}): {self.message}"
        if self.context:
            base += f" | context={self.context}"
        if self.details is not None:
            base += f" | details={self.details}"
        if self.cause is not None:
            base += f" | cause={repr(self.cause)}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Return a serializable representation suitable for API responses.

        Note: Do not include large or sensitive objects inside ``details`` or
        ``cause`` when sending to untrusted clients.
        """
        return {
            "error": {
                "type": self.__class__.__name__,
                "code": self.code,
                "message": self.message,
                "status_code": self.status_code,
                "details": self.details,
                "context": self.context,
                "timestamp": self.timestamp,
            }
        }

    def with_context(self, **ctx: Any) -> "AppError":
        """Return self after extending the context dict. Useful for chaining.

        Example:
        raise err.with_context(run_id=run_id)
        """
        self.context.update({k: v for k, v in ctx.items() if v is not None})
        return self

    @classmethod
    def from_exception(
        cls, exc: BaseException, message: Optional[str] = None
    ) -> "AppError":
        """Wrap a generic exception into an AppError preserving the cause."""
        return cls(message or str(exc), cause=exc)


class NotFoundError(AppError):
    """Raised when a requested entity is missing or outside the caller's tenant.

    Foreign rows are reported exactly like missing ones so that ids from other
    institutions cannot be probed.
    """

    code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str = "Resource not found",
        *,
        entity_type: Optional[str] = None,
        entity_id: Optional[Any] = None,
        details: Optional[Any] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, cause=cause, context=context)
        if entity_type:
            self.context.setdefault("entity_type", entity_type)
        if entity_id is not None:
            self.context.setdefault("entity_id", str(entity_id))


class InvalidSelectionError(AppError):
    """Raised when the requested class selection yields nothing to schedule."""

    code = "invalid_selection"
    status_code = 400


class AccessDeniedError(AppError):
    """Raised when the current user is not permitted to perform an action.

    Contains minimal identity information to avoid leaking sensitive data
    in logs or to clients while still being actionable.
    """

    code = "access_denied"
    status_code = 403

    def __init__(
        self,
        message: str = "Access denied",
        *,
        user_id: Optional[Any] = None,
        required_roles: Optional[list] = None,
        details: Optional[Any] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, cause=cause, context=context)
        if user_id is not None:
            # avoid storing PII beyond an opaque id
            self.context.setdefault("user_id", str(user_id))
        if required_roles:
            self.context.setdefault("required_roles", required_roles)


class CreationRejectedError(AppError):
    """Raised by the exam module when a single exam cannot be created.

    Covers rule violations that concern only one class-course (empty roster,
    percentage overflow, an exam of the same type already stored). Batch
    callers count these as conflicts and move on.
    """

    code = "creation_rejected"
    status_code = 409

    def __init__(
        self,
        message: str = "Exam creation rejected",
        *,
        class_course_id: Optional[Any] = None,
        reason: Optional[str] = None,
        details: Optional[Any] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, cause=cause, context=context)
        self.reason = reason or "rejected"
        if class_course_id is not None:
            self.context.setdefault("class_course_id", str(class_course_id))
        self.context.setdefault("reason", self.reason)


class SchedulingError(AppError):
    """Generic exam scheduling error.

    Base for orchestration failures. Handlers map it to a 500 status by
    default; subclasses can adjust it.
    """

    code = "scheduling_error"
    status_code = 500

    def __init__(
        self,
        message: str = "Exam scheduling error",
        *,
        phase: Optional[str] = None,
        details: Optional[Any] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, cause=cause, context=context)
        if phase:
            self.context.setdefault("phase", phase)


class RunRecordingError(SchedulingError):
    """Raised when a scheduling run cannot be persisted or linked to its exams."""

    code = "run_recording_failed"

    def __init__(
        self,
        message: str = "Failed to record or link exam scheduling run",
        *,
        run_id: Optional[Any] = None,
        details: Optional[Any] = None,
        cause: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message, phase="recording", details=details, cause=cause, context=context
        )
        if run_id is not None:
            self.context.setdefault("run_id", str(run_id))


__all__ = [
    "AppError",
    "NotFoundError",
    "InvalidSelectionError",
    "AccessDeniedError",
    "CreationRejectedError",
    "SchedulingError",
    "RunRecordingError",
]
