"""Display order of works.

The order is a custom permutation of the status values, so it cannot be
expressed as a single ORDER BY on the stored integer and is applied here.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, List, TypeVar

from ..core.enums import WorkStatus

T = TypeVar("T")

UNKNOWN_STATUS_PRIORITY = 8

_STATUS_PRIORITY = {
    WorkStatus.IN_PROGRESS: 1,
    WorkStatus.IN_DELIVERY: 2,
    WorkStatus.WAITING_DROPOFF: 3,
    WorkStatus.PICKUP_REQUESTING: 4,
    WorkStatus.REQUESTING: 5,
    WorkStatus.REQUEST_PLANNED: 6,
    WorkStatus.COMPLETED: 7,
}


def status_priority(status) -> int:
    """Lower sorts first; unknown values fall into the last bucket."""
    try:
        return _STATUS_PRIORITY.get(status, UNKNOWN_STATUS_PRIORITY)
    except TypeError:
        return UNKNOWN_STATUS_PRIORITY


def _as_timestamp(value) -> float:
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time()).timestamp()
    return float(value)


def _sort_key(work):
    delivery = getattr(work, "delivery_date", None)
    if delivery is None:
        return (status_priority(getattr(work, "status", None)), 1, 0.0)
    return (status_priority(getattr(work, "status", None)), 0, _as_timestamp(delivery))


def sort_works(works: Iterable[T]) -> List[T]:
    """Order by status priority, then scheduled delivery (undated last).

    Returns a new list; sorted() is stable so full ties keep input order.
    """
    return sorted(works, key=_sort_key)
