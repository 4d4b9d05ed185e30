from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Literal
from datetime import datetime

Difficulty = Literal["beginner", "intermediate", "advanced"]


class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    icon: Optional[str] = None
    color: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name must not be empty")
        return v.strip()


class SubjectResponse(BaseModel):
    id: str
    name: str
    icon: Optional[str] = None
    color: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SubjectWithTopicCount(BaseModel):
    subject: SubjectResponse
    topic_count: int


class TopicCreate(BaseModel):
    subject_id: str
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    difficulty_level: Difficulty = "beginner"

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name must not be empty")
        return v.strip()


class TopicResponse(BaseModel):
    id: str
    subject_id: str
    name: str
    description: Optional[str] = None
    difficulty_level: Difficulty = "beginner"
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TopicWithVideoCount(BaseModel):
    topic: TopicResponse
    video_count: int


class VideoCreate(BaseModel):
    topic_id: str
    youtube_id: Optional[str] = None
    url: Optional[str] = None
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    duration: int = Field(0, ge=0)
    difficulty: Difficulty = "beginner"
    source: Optional[str] = None

    @model_validator(mode="after")
    def needs_video_reference(self):
        if not self.youtube_id and not self.url:
            raise ValueError("Either youtube_id or url is required")
        return self


class VideoResponse(BaseModel):
    id: str
    topic_id: str
    youtube_id: str
    title: str
    description: Optional[str] = None
    duration: int = 0
    difficulty: Difficulty = "beginner"
    source: Optional[str] = None
    created_at: Optional[datetime] = None
    duration_label: str = "0:00"
    embed_url: str = ""
    thumbnail_url: str = ""

    class Config:
        from_attributes = True


class PaginatedVideos(BaseModel):
    videos: List[VideoResponse]
    total: int
    has_more: bool


class SearchResults(BaseModel):
    query: str
    subjects: List[SubjectResponse] = []
    topics: List[TopicResponse] = []
    videos: List[VideoResponse] = []
