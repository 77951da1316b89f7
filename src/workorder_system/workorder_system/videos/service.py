from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_SIGNED_URL_SECONDS, VIDEO_EXTENSIONS
from ..core.exceptions import NotFoundError, ValidationError
from ..storage.local_storage import LocalFileStorage
from .model import WorkVideo
from .repository import VideoRepository
from .youtube import is_valid_youtube_url, youtube_embed_url, youtube_thumbnail_url

logger = logging.getLogger(__name__)

VIDEO_FOLDER = "videos"


class VideoService:
    """Use case: manage work instruction videos (admin)."""

    def __init__(self, videos: VideoRepository, storage: LocalFileStorage):
        self._videos = videos
        self._storage = storage

    def list_videos(self) -> Sequence[WorkVideo]:
        return self._videos.list_live()

    def get(self, video_id: int) -> WorkVideo:
        video = self._videos.get_by_id(int(video_id))
        if not video:
            raise NotFoundError("Video does not exist")
        return video

    def add_youtube(self, *, title: str, url: str, admin_id: Optional[int] = None) -> int:
        title = require_non_empty(title, "Video title")
        url = (url or "").strip()
        if not is_valid_youtube_url(url):
            raise ValidationError("Enter a valid YouTube URL")
        return self._videos.create(title=title, url=url, storage_path=None, created_admin_id=admin_id)

    def upload(self, *, title: str, upload, admin_id: Optional[int] = None) -> int:
        title = require_non_empty(title, "Video title")
        if upload is None:
            raise ValidationError("Choose a video file to upload")

        path = self._storage.save(upload, folder=VIDEO_FOLDER, allowed_extensions=VIDEO_EXTENSIONS)
        try:
            return self._videos.create(title=title, url=None, storage_path=path, created_admin_id=admin_id)
        except Exception:
            logger.exception("video insert failed, removing stored file %s", path)
            self._storage.delete(path)
            raise

    def delete_video(self, video_id: int) -> None:
        if not self._videos.soft_delete(int(video_id)):
            raise NotFoundError("Video does not exist")

    def playback_url(self, video: WorkVideo, *, expires_in: int = DEFAULT_SIGNED_URL_SECONDS) -> Optional[str]:
        if video.storage_path:
            return self._storage.signed_url(video.storage_path, expires_in=expires_in)
        if video.url:
            return youtube_embed_url(video.url)
        return None

    def thumbnail_url(self, video: WorkVideo) -> Optional[str]:
        # uploaded files have no server-side thumbnail
        if video.url and not video.storage_path:
            return youtube_thumbnail_url(video.url)
        return None

    def to_dict(self, video: WorkVideo) -> dict:
        return {
            "id": video.video_id,
            "title": video.title,
            "url": video.url,
            "is_upload": video.is_upload,
            "playback_url": self.playback_url(video),
            "thumbnail_url": self.thumbnail_url(video),
            "created_at": video.created_at.isoformat() if video.created_at else None,
        }
