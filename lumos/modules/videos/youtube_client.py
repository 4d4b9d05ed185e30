"""YouTube Data API v3 lookups for the video learning page."""
import logging
import re
from datetime import datetime
from typing import Optional

import httpx

from lumos.config import settings
from lumos.modules.videos.schemas import VideoData

logger = logging.getLogger(__name__)

VIDEO_ID_PATTERNS = [
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([^&\n?#]+)"),
    re.compile(r"youtube\.com/watch\?.*v=([^&\n?#]+)"),
]
ISO_DURATION = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


def extract_video_id(url: str) -> Optional[str]:
    """Video id from watch, youtu.be or embed URLs"""
    for pattern in VIDEO_ID_PATTERNS:
        match = pattern.search(url or "")
        if match:
            return match.group(1)
    return None


def parse_duration(duration: Optional[str]) -> str:
    """ISO-8601 duration as H:MM:SS, or M:SS under an hour"""
    match = ISO_DURATION.match(duration or "")
    if not match:
        return "0:00"
    hours, minutes, seconds = (int(part or 0) for part in match.groups())
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def thumbnail_url(video_id: str, quality: str = "maxres") -> str:
    name = "maxresdefault" if quality == "maxres" else "hqdefault"
    return f"https://img.youtube.com/vi/{video_id}/{name}.jpg"


def embed_url(video_id: str) -> str:
    return f"https://www.youtube.com/embed/{video_id}"


class YouTubeClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.youtube_api_key
        self.base_url = (base_url or settings.youtube_api_url).rstrip("/")
        self.transport = transport

    def placeholder(self, video_id: str) -> VideoData:
        return VideoData(
            id=video_id,
            title="YouTube Video",
            description="Video description not available",
            duration="0:00",
            thumbnail=thumbnail_url(video_id),
            channel_title="Unknown Channel",
            published_at=datetime.utcnow().isoformat(),
        )

    async def get_video_data(self, video_id: str) -> Optional[VideoData]:
        """Metadata for one video; placeholder data without an API key, None on failure"""
        if not self.api_key:
            logger.warning("YouTube API key not set, returning placeholder video data")
            return self.placeholder(video_id)
        try:
            async with httpx.AsyncClient(timeout=15.0, transport=self.transport) as client:
                response = await client.get(
                    f"{self.base_url}/videos",
                    params={"id": video_id, "part": "snippet,contentDetails,statistics", "key": self.api_key},
                )
            if response.status_code != 200:
                logger.error(f"YouTube API error: {response.status_code}")
                return None
            items = response.json().get("items") or []
            if not items:
                logger.warning(f"YouTube video not found: {video_id}")
                return None
            video = items[0]
            snippet = video.get("snippet") or {}
            statistics = video.get("statistics") or {}
            thumbnails = snippet.get("thumbnails") or {}
            thumbnail = (thumbnails.get("maxres") or thumbnails.get("high") or {}).get("url") or thumbnail_url(video_id)
            return VideoData(
                id=video_id,
                title=snippet.get("title", ""),
                description=snippet.get("description", ""),
                duration=parse_duration((video.get("contentDetails") or {}).get("duration")),
                thumbnail=thumbnail,
                channel_title=snippet.get("channelTitle", ""),
                published_at=snippet.get("publishedAt", ""),
                view_count=str(statistics.get("viewCount", "0")),
                like_count=str(statistics.get("likeCount", "0")),
            )
        except Exception as e:
            logger.error(f"Error fetching YouTube video data: {e}")
            return None
