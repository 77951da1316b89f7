from __future__ import annotations

import csv
import io
from typing import Iterable

from .model import Worker

WORKER_LIST_HEADERS = ["Name", "Email", "Group", "Unit price ratio", "Next visit date", "Registered"]


def export_workers_csv(workers: Iterable[Worker]) -> bytes:
    out = io.StringIO()
    writer = csv.writer(out, quoting=csv.QUOTE_ALL)
    writer.writerow(WORKER_LIST_HEADERS)
    for w in workers:
        writer.writerow(
            [
                w.name,
                w.email,
                w.group_name or "-",
                "-" if w.unit_price_ratio is None else f"{w.unit_price_ratio:g}",
                w.next_visit_date.strftime("%Y/%m/%d") if w.next_visit_date else "-",
                w.created_at.strftime("%Y/%m/%d") if w.created_at else "-",
            ]
        )
    return out.getvalue().encode("utf-8-sig")
