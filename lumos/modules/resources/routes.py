from fastapi import APIRouter, Depends, Query
from lumos.database.supabase_client import get_supabase
from lumos.modules.resources.schemas import (
    SubjectCreate, SubjectResponse, SubjectWithTopicCount,
    TopicCreate, TopicResponse, TopicWithVideoCount,
    VideoCreate, VideoResponse, PaginatedVideos, SearchResults
)
from lumos.modules.resources.service import ResourceService
from lumos.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict, Optional, Literal

router = APIRouter(prefix="/resources", tags=["resources"])


def get_resource_service(supabase: Client = Depends(get_supabase)) -> ResourceService:
    return ResourceService(supabase)


@router.get("/subjects", response_model=List[SubjectResponse])
async def list_subjects(
    limit: int = Query(50, ge=1, le=200),
    service: ResourceService = Depends(get_resource_service)
):
    return service.list_subjects(limit)


@router.get("/subjects/{subject_id}", response_model=SubjectWithTopicCount)
async def get_subject(subject_id: str, service: ResourceService = Depends(get_resource_service)):
    """Subject with the number of topics under it"""
    return service.get_subject_with_topic_count(subject_id)


@router.get("/subjects/{subject_id}/topics", response_model=List[TopicResponse])
async def list_topics(
    subject_id: str,
    limit: int = Query(50, ge=1, le=200),
    service: ResourceService = Depends(get_resource_service)
):
    return service.list_topics(subject_id, limit)


@router.get("/topics/{topic_id}", response_model=TopicWithVideoCount)
async def get_topic(topic_id: str, service: ResourceService = Depends(get_resource_service)):
    return service.get_topic_with_video_count(topic_id)


@router.get("/topics/{topic_id}/videos", response_model=List[VideoResponse])
async def list_topic_videos(
    topic_id: str,
    difficulty: Literal["all", "beginner", "intermediate", "advanced"] = "all",
    limit: int = Query(50, ge=1, le=200),
    service: ResourceService = Depends(get_resource_service)
):
    return service.list_topic_videos(topic_id, difficulty, limit)


@router.get("/topics/{topic_id}/videos/page", response_model=PaginatedVideos)
async def paginated_topic_videos(
    topic_id: str,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    service: ResourceService = Depends(get_resource_service)
):
    return service.paginated_topic_videos(topic_id, page, page_size)


@router.get("/videos/{video_id}", response_model=VideoResponse)
async def get_video(video_id: str, service: ResourceService = Depends(get_resource_service)):
    return service.get_video(video_id)


@router.get("/search", response_model=SearchResults)
async def search(
    q: str = "",
    subject_id: Optional[str] = None,
    topic_id: Optional[str] = None,
    service: ResourceService = Depends(get_resource_service)
):
    """Search subjects, topics and videos"""
    return service.search(q, subject_id, topic_id)


# ===== Catalog management (teachers) =====

@router.post("/subjects", response_model=SubjectResponse, status_code=201)
async def create_subject(
    subject_data: SubjectCreate,
    user_data: Dict = Depends(require_permission("resources:manage")),
    service: ResourceService = Depends(get_resource_service)
):
    return service.create_subject(subject_data)


@router.post("/topics", response_model=TopicResponse, status_code=201)
async def create_topic(
    topic_data: TopicCreate,
    user_data: Dict = Depends(require_permission("resources:manage")),
    service: ResourceService = Depends(get_resource_service)
):
    return service.create_topic(topic_data)


@router.post("/videos", response_model=VideoResponse, status_code=201)
async def create_video(
    video_data: VideoCreate,
    user_data: Dict = Depends(require_permission("resources:manage")),
    service: ResourceService = Depends(get_resource_service)
):
    """Add a YouTube video to a topic, by id or URL"""
    return service.create_video(video_data)
