from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal
from datetime import datetime

MessageRole = Literal["user", "assistant", "system"]


class SessionCreate(BaseModel):
    title: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None


class SessionResponse(BaseModel):
    id: str
    user_id: str
    title: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None
    started_at: datetime
    ended_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MessageCreate(BaseModel):
    role: MessageRole
    content: str = Field(..., min_length=1)
    session_id: Optional[str] = None


class MessageResponse(BaseModel):
    id: str
    user_id: str
    session_id: Optional[str] = None
    role: MessageRole
    content: str
    ts: datetime
    idx: int

    class Config:
        from_attributes = True


class AnalyticsCreate(BaseModel):
    emotion: str = "neutral"
    tokens_used: int = 0
    duration_sec: float = 0
    metrics: Optional[Dict[str, Any]] = None


class AnalyticsResponse(BaseModel):
    id: str
    session_id: str
    user_id: str
    emotion: str
    tokens_used: int
    duration_sec: float
    metrics: Optional[Dict[str, Any]] = None
    created_at: datetime

    class Config:
        from_attributes = True


class SessionSummary(BaseModel):
    session_id: str
    total_messages: int
    duration_sec: float
    tokens_used: int
    emotion_breakdown: Dict[str, int] = {}
    most_frequent_emotion: str = "neutral"
    messages: List[MessageResponse] = []
