from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import WorkVideo
from .repository import VideoRepository

_SELECT = """
    SELECT id, video_title, video_url, storage_path, created_admin_id, created_at
    FROM work_videos
    WHERE deleted_at IS NULL
"""


def _to_video(r: dict) -> WorkVideo:
    return WorkVideo(
        video_id=int(r["id"]),
        title=r["video_title"],
        url=r.get("video_url"),
        storage_path=r.get("storage_path"),
        created_admin_id=r.get("created_admin_id"),
        created_at=r.get("created_at"),
    )


class MySQLVideoRepository(VideoRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, video_id: int) -> Optional[WorkVideo]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " AND id=%s", (video_id,))
            row = fetchone(cur)
            return _to_video(row) if row else None

    def list_live(self) -> Sequence[WorkVideo]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " ORDER BY created_at DESC, id DESC")
            return [_to_video(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        title: str,
        url: Optional[str],
        storage_path: Optional[str],
        created_admin_id: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO work_videos(video_title, video_url, storage_path, created_admin_id) VALUES(%s,%s,%s,%s)",
                (title, url, storage_path, created_admin_id),
            )
            return int(cur.lastrowid)

    def soft_delete(self, video_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE work_videos SET deleted_at=NOW() WHERE id=%s AND deleted_at IS NULL", (video_id,))
            return cur.rowcount > 0
