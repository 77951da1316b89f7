from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import MailRecord


class MailOutboxRepository(Protocol):
    def enqueue(
        self,
        *,
        worker_id: Optional[int],
        mail_from: str,
        mail_to: str,
        subject: str,
        body: str,
    ) -> int:
        raise NotImplementedError

    def list_recent(self, limit: int = 50) -> Sequence[MailRecord]:
        raise NotImplementedError
