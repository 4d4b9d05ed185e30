from fastapi import APIRouter, Depends, HTTPException, Request
from lumos.modules.videos.schemas import (
    VideoData, VideoSummary, VideoSummaryRequest, VideoLookupRequest, VideoLookupResponse
)
from lumos.modules.videos.service import VideoService
from lumos.modules.videos.youtube_client import extract_video_id
from lumos.modules.llm.openrouter_client import OpenRouterClient, OpenRouterError
from lumos.modules.llm.routes import get_openrouter_client
from lumos.core.rate_limit import limiter
from lumos.config import settings
import httpx
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["videos"])


def get_video_service(client: OpenRouterClient = Depends(get_openrouter_client)) -> VideoService:
    return VideoService(client)


@router.get("/videos/{video_id}", response_model=VideoData)
async def get_video(video_id: str, service: VideoService = Depends(get_video_service)):
    video = await service.get_video(video_id)
    if not video:
        raise HTTPException(status_code=502, detail="Failed to fetch video data")
    return video


@router.post("/videos/lookup", response_model=VideoLookupResponse)
@limiter.limit(settings.llm_rate_limit)
async def lookup_video(
    request: Request,
    body: VideoLookupRequest,
    service: VideoService = Depends(get_video_service)
):
    """Video metadata plus an AI learning summary for a YouTube URL"""
    video_id = extract_video_id(body.url)
    if not video_id:
        raise HTTPException(status_code=400, detail="Invalid YouTube URL")
    video = await service.get_video(video_id)
    if not video:
        raise HTTPException(status_code=502, detail="Failed to fetch video data")
    return VideoLookupResponse(video=video, summary=await service.summarize_video(video))


@router.post("/generate-video-summary", response_model=VideoSummary)
@limiter.limit(settings.llm_rate_limit)
async def generate_video_summary(
    request: Request,
    body: VideoSummaryRequest,
    service: VideoService = Depends(get_video_service)
):
    if not body.title or not body.description:
        raise HTTPException(status_code=400, detail="Title and description are required")
    if not service.client.configured:
        raise HTTPException(status_code=500, detail="OpenRouter API key not configured")
    try:
        return await service.summarize(body.title, body.description, body.duration, body.channel_title)
    except (OpenRouterError, httpx.HTTPError) as e:
        logger.error(f"Video summary failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate video summary")
