from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import WorkVideo


class VideoRepository(Protocol):
    def get_by_id(self, video_id: int) -> Optional[WorkVideo]:
        raise NotImplementedError

    def list_live(self) -> Sequence[WorkVideo]:
        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        url: Optional[str],
        storage_path: Optional[str],
        created_admin_id: Optional[int],
    ) -> int:
        raise NotImplementedError

    def soft_delete(self, video_id: int) -> bool:
        raise NotImplementedError
