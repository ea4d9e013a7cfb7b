"""
YouTube URL helpers.

Course videos are entered as YouTube links. The 11-character video id is
extracted from watch, short-link, embed and legacy ``/v/`` / ``/e/`` URLs;
anything else yields ``None`` and is rejected by course validation.
"""

import re
from typing import Optional

YOUTUBE_ID_PATTERN = re.compile(
    r"(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)([^\"&?/\s]{11})",
    re.IGNORECASE,
)

THUMBNAIL_URL = "https://img.youtube.com/vi/{video_id}/hqdefault.jpg"
EMBED_URL = "https://www.youtube.com/embed/{video_id}?modestbranding=1&rel=0&showinfo=0&controls=1"


def extract_youtube_id(url: Optional[str]) -> Optional[str]:
    """
    Return the video id of a YouTube URL, or None.

    Example:
        >>> extract_youtube_id("https://youtu.be/dQw4w9WgXcQ")
        'dQw4w9WgXcQ'
    """
    if not url:
        return None
    match = YOUTUBE_ID_PATTERN.search(url.strip())
    return match.group(1) if match else None


def thumbnail_url(video_id: str) -> str:
    return THUMBNAIL_URL.format(video_id=video_id)


def embed_url(video_id: str) -> str:
    return EMBED_URL.format(video_id=video_id)
