"""Text carried by work QR labels.

Labels may embed other tokens (e.g. ``workerid:1,workid:#123``); only the
``workid`` token matters.
"""

from __future__ import annotations

import re
from typing import Optional

WORK_ID_PATTERN = re.compile(r"workid:(?:#)?([0-9]+)", re.IGNORECASE)


def parse_work_id(payload: Optional[str]) -> Optional[str]:
    """Return the digits of the first workid token, or None when there is none."""
    if not payload:
        return None
    match = WORK_ID_PATTERN.search(payload)
    if not match:
        return None
    return match.group(1)


def build_payload(work_id: int) -> str:
    return f"workid:#{int(work_id)}"
