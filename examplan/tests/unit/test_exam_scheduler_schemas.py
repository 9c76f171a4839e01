# examplan/tests/unit/test_exam_scheduler_schemas.py

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from examplan.schemas.exam_scheduler import ScheduleRequest


def make_request(date_start, date_end) -> ScheduleRequest:
    return ScheduleRequest(
        academic_year_id=uuid4(),
        semester_id=uuid4(),
        exam_type_id=uuid4(),
        percentage=Decimal("40"),
        date_start=date_start,
        date_end=date_end,
    )


def test_zulu_window_is_kept_in_utc():
    request = make_request("2025-01-01T00:00:00Z", "2025-01-10T00:00:00Z")

    assert request.date_start == datetime(2025, 1, 1, tzinfo=timezone.utc)
    assert request.date_end == datetime(2025, 1, 10, tzinfo=timezone.utc)
    assert request.date_start.utcoffset() == timedelta(0)


def test_offset_window_is_converted_to_utc():
    request = make_request("2025-01-01T00:00:00+05:00", "2025-01-10T00:00:00+05:00")

    assert request.date_start == datetime(2024, 12, 31, 19, 0, tzinfo=timezone.utc)
    assert request.date_end == datetime(2025, 1, 9, 19, 0, tzinfo=timezone.utc)
    assert request.date_start.tzinfo is timezone.utc


def test_naive_window_is_read_as_utc():
    request = make_request(datetime(2025, 1, 1), datetime(2025, 1, 10))

    assert request.date_start == datetime(2025, 1, 1, tzinfo=timezone.utc)
    assert request.date_end == datetime(2025, 1, 10, tzinfo=timezone.utc)


def test_mixed_window_is_a_validation_error():
    with pytest.raises(ValidationError) as exc:
        make_request("2025-01-01T00:00:00Z", "2025-01-10T00:00:00")

    assert "UTC offset" in str(exc.value)


def test_inverted_window_is_a_validation_error():
    with pytest.raises(ValidationError):
        make_request(datetime(2025, 1, 10), datetime(2025, 1, 1))


def test_window_order_compares_instants():
    # 12:00+05:00 is 07:00 UTC, before the 10:00 UTC start
    with pytest.raises(ValidationError):
        make_request("2025-01-01T10:00:00+00:00", "2025-01-01T12:00:00+05:00")
