from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import MailRecord
from .repository import MailOutboxRepository


class MySQLMailOutboxRepository(MailOutboxRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def enqueue(
        self,
        *,
        worker_id: Optional[int],
        mail_from: str,
        mail_to: str,
        subject: str,
        body: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO send_mails(worker_id, mail_from, mail_to, subject, body) VALUES(%s,%s,%s,%s,%s)",
                (worker_id, mail_from, mail_to, subject, body),
            )
            return int(cur.lastrowid)

    def list_recent(self, limit: int = 50) -> Sequence[MailRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, worker_id, mail_from, mail_to, subject, body, sent_at, created_at
                FROM send_mails
                ORDER BY created_at DESC, id DESC
                LIMIT %s
                """,
                (int(limit),),
            )
            return [
                MailRecord(
                    mail_id=int(r["id"]),
                    worker_id=r.get("worker_id"),
                    mail_from=r["mail_from"],
                    mail_to=r["mail_to"],
                    subject=r["subject"],
                    body=r["body"],
                    sent_at=r.get("sent_at"),
                    created_at=r.get("created_at"),
                )
                for r in fetchall(cur)
            ]
