# examplan/core/__init__.py

from .config import get_settings, settings
from .security import create_access_token, decode_access_token
from .exceptions import (
    AppError,
    NotFoundError,
    InvalidSelectionError,
    AccessDeniedError,
    CreationRejectedError,
    SchedulingError,
    RunRecordingError,
)


__all__ = [
    "get_settings",
    "settings",
    "create_access_token",
    "decode_access_token",
    "AppError",
    "NotFoundError",
    "InvalidSelectionError",
    "AccessDeniedError",
    "CreationRejectedError",
    "SchedulingError",
    "RunRecordingError",
]
