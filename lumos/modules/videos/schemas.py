from pydantic import BaseModel, Field, AliasChoices
from typing import Optional, List, Literal

Difficulty = Literal["beginner", "intermediate", "advanced"]


class VideoData(BaseModel):
    id: str
    title: str
    description: str
    duration: str
    thumbnail: str
    channel_title: str
    published_at: str
    view_count: str = "0"
    like_count: str = "0"


class VideoSummary(BaseModel):
    key_points: List[str] = []
    learning_objectives: List[str] = []
    difficulty: Difficulty = "beginner"
    estimated_duration: Optional[str] = None
    prerequisites: List[str] = []
    summary: str
    basis: Optional[Literal["transcript", "description", "title_only"]] = None
    confidence: Optional[float] = Field(None, ge=0, le=1)


class VideoSummaryRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[str] = None
    channel_title: Optional[str] = Field(None, validation_alias=AliasChoices("channel_title", "channelTitle"))


class VideoLookupRequest(BaseModel):
    url: str


class VideoLookupResponse(BaseModel):
    video: VideoData
    summary: Optional[VideoSummary] = None
