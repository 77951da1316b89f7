from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import month_bounds, previous_month
from ..core.exceptions import ValidationError
from .repository import WorkRepository


@dataclass(frozen=True)
class ProceedsReport:
    year_month: str
    rows: list[dict]
    total: int


def parse_year_month(value: str) -> tuple[int, int]:
    """Accept 'YYYY/MM' or 'YYYY-MM'."""
    try:
        parsed = datetime.strptime(value.replace("-", "/"), "%Y/%m")
    except (AttributeError, ValueError):
        raise ValidationError("Month must be formatted as YYYY/MM")
    return parsed.year, parsed.month


def month_options(start_year_month: str, today: date) -> list[dict]:
    """Selectable months from start_year_month up to the current month, newest first."""

    year, month = parse_year_month(start_year_month)
    options: list[dict] = []
    while (year, month) <= (today.year, today.month):
        value = f"{year:04d}/{month:02d}"
        options.append({"value": value, "label": value})
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)
    options.reverse()
    return options


def default_month(options: list[dict], today: date) -> Optional[str]:
    """Previous month when selectable, otherwise the newest option."""

    if not options:
        return None
    year, month = previous_month(today)
    previous = f"{year:04d}/{month:02d}"
    if any(o["value"] == previous for o in options):
        return previous
    return options[0]["value"]


class ProceedsReportService:
    """Monthly proceeds of a worker: completed works by completion month."""

    def __init__(self, works: WorkRepository):
        self._works = works

    def monthly(self, *, worker_id: int, year_month: str) -> ProceedsReport:
        year, month = parse_year_month(year_month)
        start, end = month_bounds(year, month)
        rows = self._works.list_completed_between(worker_id=int(worker_id), start=start, end=end)

        out_rows = [
            {
                "id": r.work_id,
                "title": r.title or "-",
                "cost": r.cost,
                "ended_at": r.ended_at.strftime("%Y/%m/%d %H:%M"),
            }
            for r in rows
        ]
        total = sum(r.cost for r in rows)
        return ProceedsReport(year_month=f"{year:04d}/{month:02d}", rows=out_rows, total=total)
