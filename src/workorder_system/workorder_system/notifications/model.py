from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class MailRecord:
    """Một dòng trong hàng đợi send_mails (mail gửi đi bởi tiến trình bên ngoài)."""

    mail_id: int
    worker_id: Optional[int]
    mail_from: str
    mail_to: str
    subject: str
    body: str
    sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
