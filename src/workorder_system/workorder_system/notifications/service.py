from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..identity.model import Invitation
from ..workers.repository import WorkerRepository
from .model import MailRecord
from .repository import MailOutboxRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """Use case: queue notification mails into the send_mails outbox.

    Việc gửi SMTP thực tế do tiến trình bên ngoài đọc bảng send_mails đảm nhận.
    """

    def __init__(
        self,
        outbox: MailOutboxRepository,
        workers: WorkerRepository,
        *,
        from_address: str,
        base_url: str = "",
    ):
        self._outbox = outbox
        self._workers = workers
        self._from = from_address
        self._base_url = base_url.rstrip("/")

    def send(self, worker_ids: Sequence[int], subject: str, body: str) -> int:
        if not worker_ids:
            raise ValidationError("Select at least one worker")
        subject = require_non_empty(subject, "Subject")
        body = require_non_empty(body, "Body")

        recipients = [w for w in self._workers.get_many([int(i) for i in worker_ids]) if w.email]
        if not recipients:
            raise ValidationError("None of the selected workers can receive mail")

        for worker in recipients:
            self._outbox.enqueue(
                worker_id=worker.worker_id,
                mail_from=self._from,
                mail_to=worker.email,
                subject=subject,
                body=body,
            )
        logger.info("queued %d notification mails", len(recipients))
        return len(recipients)

    def _link(self, path: str, token: str) -> str:
        return f"{self._base_url}{path}?token={token}"

    def queue_invitation(self, invitation: Invitation, *, worker_id: Optional[int] = None) -> int:
        link = self._link(f"/{invitation.role.value}/invite/accept", invitation.token)
        who = "administrator" if invitation.role == Role.ADMIN else "worker"
        return self._outbox.enqueue(
            worker_id=worker_id,
            mail_from=self._from,
            mail_to=invitation.email,
            subject="You have been invited",
            body=f"You have been registered as a {who}. Set your password here:\n{link}",
        )

    def queue_password_reset(self, invitation: Invitation) -> int:
        link = self._link(f"/{invitation.role.value}/password-reset/confirm", invitation.token)
        return self._outbox.enqueue(
            worker_id=None,
            mail_from=self._from,
            mail_to=invitation.email,
            subject="Password reset",
            body=f"Open the link below to choose a new password:\n{link}",
        )

    def list_recent(self, limit: int = 50) -> Sequence[MailRecord]:
        return self._outbox.list_recent(limit)
