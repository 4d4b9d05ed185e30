from supabase import Client
from lumos.modules.resources.schemas import (
    SubjectCreate, SubjectResponse, SubjectWithTopicCount,
    TopicCreate, TopicResponse, TopicWithVideoCount,
    VideoCreate, VideoResponse, PaginatedVideos, SearchResults
)
from lumos.modules.videos.youtube_client import extract_video_id, embed_url, thumbnail_url
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime
import re
import logging

logger = logging.getLogger(__name__)

SUBJECT_COLUMNS = "id,name,icon,color,description,created_at"
TOPIC_COLUMNS = "id,subject_id,name,description,difficulty_level,created_at"
VIDEO_COLUMNS = "id,youtube_id,title,description,duration,difficulty,source,topic_id,created_at"
DEFAULT_LIMIT = 50


def sanitize_query(query: Optional[str]) -> str:
    """Commas would split a PostgREST or-filter; collapse them and runs of whitespace"""
    return re.sub(r"\s+", " ", (query or "").replace(",", " ")).strip()


def format_duration(seconds: int) -> str:
    """Seconds as H:MM:SS, or M:SS under an hour"""
    seconds = max(0, int(seconds or 0))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def parse_clock(value: Any) -> int:
    """'1:02:03' / '12:34' / 75 -> seconds"""
    if isinstance(value, (int, float)):
        return int(value)
    seconds = 0
    for part in str(value or "0").split(":"):
        seconds = seconds * 60 + int(part or 0)
    return seconds


def to_video_response(row: Dict[str, Any]) -> VideoResponse:
    youtube_id = row.get("youtube_id", "")
    return VideoResponse(
        **row,
        duration_label=format_duration(row.get("duration") or 0),
        embed_url=embed_url(youtube_id),
        thumbnail_url=thumbnail_url(youtube_id),
    )


class ResourceService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    # ===== Subjects =====

    def list_subjects(self, limit: int = DEFAULT_LIMIT) -> List[SubjectResponse]:
        try:
            result = self.supabase.table("subjects")\
                .select(SUBJECT_COLUMNS)\
                .order("name")\
                .limit(limit)\
                .execute()
            return [SubjectResponse(**s) for s in result.data or []]
        except Exception as e:
            logger.error(f"Failed to load subjects: {e}")
            raise HTTPException(status_code=500, detail="Failed to load subjects. Please try again later.")

    def get_subject(self, subject_id: str) -> SubjectResponse:
        """Get subject by ID"""
        try:
            result = self.supabase.table("subjects")\
                .select(SUBJECT_COLUMNS)\
                .eq("id", subject_id)\
                .limit(1)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Subject not found")
            return SubjectResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_subject_with_topic_count(self, subject_id: str) -> SubjectWithTopicCount:
        subject = self.get_subject(subject_id)
        return SubjectWithTopicCount(subject=subject, topic_count=self._count("topics", "subject_id", subject_id))

    def create_subject(self, subject_data: SubjectCreate) -> SubjectResponse:
        try:
            row = subject_data.model_dump()
            row["created_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("subjects").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create subject")
            logger.info(f"Created subject '{subject_data.name}'")
            return SubjectResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            if "duplicate key" in str(e).lower() or "23505" in str(e):
                raise HTTPException(status_code=409, detail="Subject already exists")
            raise HTTPException(status_code=500, detail=str(e))

    # ===== Topics =====

    def list_topics(self, subject_id: str, limit: int = DEFAULT_LIMIT) -> List[TopicResponse]:
        """Topics of a subject, by name"""
        try:
            result = self.supabase.table("topics")\
                .select(TOPIC_COLUMNS)\
                .eq("subject_id", subject_id)\
                .order("name")\
                .limit(limit)\
                .execute()
            return [TopicResponse(**t) for t in result.data or []]
        except Exception as e:
            logger.error(f"Failed to load topics for subject {subject_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load topics. Please try again later.")

    def get_topic(self, topic_id: str) -> TopicResponse:
        try:
            result = self.supabase.table("topics")\
                .select(TOPIC_COLUMNS)\
                .eq("id", topic_id)\
                .limit(1)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Topic not found")
            return TopicResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_topic_with_video_count(self, topic_id: str) -> TopicWithVideoCount:
        topic = self.get_topic(topic_id)
        return TopicWithVideoCount(topic=topic, video_count=self._count("videos", "topic_id", topic_id))

    def create_topic(self, topic_data: TopicCreate) -> TopicResponse:
        self.get_subject(topic_data.subject_id)
        try:
            row = topic_data.model_dump()
            row["created_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("topics").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create topic")
            return TopicResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # ===== Videos =====

    def list_topic_videos(
        self, topic_id: str, difficulty: Optional[str] = None, limit: int = DEFAULT_LIMIT
    ) -> List[VideoResponse]:
        """Videos of a topic by title; difficulty 'all' or None means no filter"""
        try:
            query = self.supabase.table("videos")\
                .select(VIDEO_COLUMNS)\
                .eq("topic_id", topic_id)
            if difficulty and difficulty != "all":
                query = query.eq("difficulty", difficulty)
            result = query.order("title").limit(limit).execute()
            return [to_video_response(v) for v in result.data or []]
        except Exception as e:
            logger.error(f"Failed to load videos for topic {topic_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load videos. Please try again later.")

    def paginated_topic_videos(self, topic_id: str, page: int = 1, page_size: int = 20) -> PaginatedVideos:
        """Newest first; has_more tells the client whether to ask for page + 1"""
        page = max(1, page)
        offset = (page - 1) * page_size
        total = self._count("videos", "topic_id", topic_id)
        try:
            result = self.supabase.table("videos")\
                .select(VIDEO_COLUMNS)\
                .eq("topic_id", topic_id)\
                .order("created_at", desc=True)\
                .range(offset, offset + page_size - 1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        videos = [to_video_response(v) for v in result.data or []]
        return PaginatedVideos(videos=videos, total=total, has_more=offset + len(videos) < total)

    def get_video(self, video_id: str) -> VideoResponse:
        try:
            result = self.supabase.table("videos")\
                .select(VIDEO_COLUMNS)\
                .eq("id", video_id)\
                .limit(1)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Video not found")
            return to_video_response(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_video(self, video_data: VideoCreate) -> VideoResponse:
        youtube_id = video_data.youtube_id or extract_video_id(video_data.url or "")
        if not youtube_id:
            raise HTTPException(status_code=400, detail="Invalid YouTube URL")
        self.get_topic(video_data.topic_id)
        try:
            row = video_data.model_dump(exclude={"url"})
            row["youtube_id"] = youtube_id
            row["created_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("videos").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create video")
            return to_video_response(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # ===== Search =====

    def search(
        self,
        query: str,
        subject_id: Optional[str] = None,
        topic_id: Optional[str] = None,
        limit: int = DEFAULT_LIMIT,
    ) -> SearchResults:
        """Case-insensitive match on names/titles and descriptions"""
        q = sanitize_query(query)
        if not q:
            return SearchResults(query=q)
        try:
            subjects = self.supabase.table("subjects")\
                .select(SUBJECT_COLUMNS)\
                .or_(f"name.ilike.%{q}%,description.ilike.%{q}%")\
                .order("name")\
                .limit(limit)\
                .execute()

            topics_query = self.supabase.table("topics")\
                .select(TOPIC_COLUMNS)\
                .or_(f"name.ilike.%{q}%,description.ilike.%{q}%")
            if subject_id:
                topics_query = topics_query.eq("subject_id", subject_id)
            topics = topics_query.order("name").limit(limit).execute()

            videos_query = self.supabase.table("videos")\
                .select(VIDEO_COLUMNS)\
                .or_(f"title.ilike.%{q}%,description.ilike.%{q}%")
            if topic_id:
                videos_query = videos_query.eq("topic_id", topic_id)
            videos = videos_query.order("created_at", desc=True).limit(limit).execute()
        except Exception as e:
            logger.error(f"Catalog search failed for '{q}': {e}")
            raise HTTPException(status_code=500, detail="Failed to search resources. Please try again later.")

        return SearchResults(
            query=q,
            subjects=[SubjectResponse(**s) for s in subjects.data or []],
            topics=[TopicResponse(**t) for t in topics.data or []],
            videos=[to_video_response(v) for v in videos.data or []],
        )

    def _count(self, table: str, column: str, value: str) -> int:
        try:
            result = self.supabase.table(table)\
                .select("id", count="exact")\
                .eq(column, value)\
                .execute()
            return result.count if result.count is not None else len(result.data or [])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
