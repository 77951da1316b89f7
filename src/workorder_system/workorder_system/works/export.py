from __future__ import annotations

import csv
import io
from typing import Iterable

from ..core.enums import status_label
from .model import Work

WORK_LIST_HEADERS = [
    "Work",
    "Status",
    "Worker",
    "Quantity",
    "Unit price",
    "Cost",
    "Delivery date",
    "Ended at",
]


def _fmt_date(value) -> str:
    return value.strftime("%Y/%m/%d") if value else "-"


def export_works_csv(works: Iterable[Work]) -> bytes:
    """CSV for the work list; BOM included so spreadsheet apps detect UTF-8."""

    out = io.StringIO()
    writer = csv.writer(out, quoting=csv.QUOTE_ALL)
    writer.writerow(WORK_LIST_HEADERS)
    for w in works:
        writer.writerow(
            [
                f"#{w.work_id} / {w.title}",
                status_label(w.status),
                w.worker_name or "-",
                w.quantity,
                w.unit_price,
                w.cost,
                _fmt_date(w.delivery_date),
                _fmt_date(w.ended_at),
            ]
        )
    return out.getvalue().encode("utf-8-sig")
