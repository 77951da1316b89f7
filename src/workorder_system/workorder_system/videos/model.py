from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class WorkVideo:
    """Video hướng dẫn công việc: link YouTube hoặc file đã tải lên."""

    video_id: int
    title: str
    url: Optional[str] = None
    storage_path: Optional[str] = None
    created_admin_id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def is_upload(self) -> bool:
        return bool(self.storage_path)
