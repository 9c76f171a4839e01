# examplan/services/scheduling/date_distributor.py
"""Even spacing of exam dates across a scheduling window."""

from datetime import datetime, timedelta
from typing import List


def distribute(count: int, start: datetime, end: datetime) -> List[datetime]:
    """
    Return ``count`` instants evenly spaced over ``[start, end]``.

    The sequence is inclusive: for two or more items the first one is
    ``start`` and the last one is exactly ``end``. A single item lands on
    ``start`` and zero items yield an empty list. An inverted window is
    clamped to a zero-length range, putting every item on ``start``.
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    if count == 0:
        return []

    span = max(end - start, timedelta(0))
    if count == 1:
        return [start]

    intervals = count - 1
    # span * i / intervals keeps the last item exactly on `end`
    return [start + (span * i) / intervals for i in range(count)]
