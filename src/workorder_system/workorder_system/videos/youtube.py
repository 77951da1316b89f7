from __future__ import annotations

import re
from typing import Optional

YOUTUBE_URL_PATTERN = re.compile(
    r"^(https?://)?(www\.)?(youtube\.com/(watch\?v=|embed/|v/)|youtu\.be/)[\w-]+(&[\w=]*)?$"
)
_VIDEO_ID_PATTERN = re.compile(
    r"(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)([^\"&?/\s]{11})"
)


def is_valid_youtube_url(url: str) -> bool:
    return bool(url) and YOUTUBE_URL_PATTERN.match(url.strip()) is not None


def youtube_video_id(url: str) -> Optional[str]:
    m = _VIDEO_ID_PATTERN.search(url or "")
    return m.group(1) if m else None


def youtube_embed_url(url: str) -> str:
    """Embed URL, or the input unchanged when no video id can be found."""

    video_id = youtube_video_id(url)
    return f"https://www.youtube.com/embed/{video_id}" if video_id else url


def youtube_thumbnail_url(url: str) -> Optional[str]:
    video_id = youtube_video_id(url)
    return f"https://img.youtube.com/vi/{video_id}/hqdefault.jpg" if video_id else None
