from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Literal
from datetime import datetime
from lumos.modules.credits.schemas import HelpGoal, UnderstandingLevel

TransactionType = Literal["earned", "spent"]
NotificationType = Literal["success", "error", "info", "warning"]
SessionStatus = Literal["active", "completed", "cancelled"]
HelpRequestStatus = Literal["matching", "matched", "completed", "cancelled"]
Mood = Literal["angry", "sad", "neutral", "happy", "confident"]


def _clean_names(values: List[str]) -> List[str]:
    cleaned = []
    for value in values:
        if not value or not value.strip():
            raise ValueError("Entries must not be empty")
        if value.strip() not in cleaned:
            cleaned.append(value.strip())
    return cleaned


class TransactionCreate(BaseModel):
    type: TransactionType
    amount: int
    activity: str = Field(..., min_length=1)
    counterpart: Optional[str] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    description: Optional[str] = None


class TransactionResponse(BaseModel):
    id: str
    user_id: str
    type: TransactionType
    amount: int
    activity: str
    counterpart: Optional[str] = None
    rating: Optional[int] = None
    description: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationCreate(BaseModel):
    type: NotificationType = "info"
    title: str = Field(..., min_length=1)
    message: str = ""


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    read: bool = False
    created_at: datetime

    class Config:
        from_attributes = True


class HelpRequestCreate(BaseModel):
    service: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    goal: HelpGoal
    level: UnderstandingLevel
    mood: Mood = "neutral"
    auto_extend: bool = False

    @field_validator("service", "subject")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Must not be empty")
        return v.strip()


class HelpRequestResponse(BaseModel):
    id: str
    student_id: str
    service: str
    subject: str
    goal: HelpGoal
    level: UnderstandingLevel
    mood: Mood
    hold_credits: int
    minutes: int
    auto_extend: bool = False
    status: HelpRequestStatus
    volunteer_id: Optional[str] = None
    created_at: datetime
    matched_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SessionStart(BaseModel):
    subject: str = Field(..., min_length=1)
    student_name: str = Field(..., min_length=1)


class SessionEnd(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    feedback: Optional[str] = None


class TutoringSessionResponse(BaseModel):
    id: str
    volunteer_id: str
    student_id: Optional[str] = None
    help_request_id: Optional[str] = None
    subject: str
    student_name: str
    status: SessionStatus
    started_at: datetime
    ended_at: Optional[datetime] = None
    duration_minutes: int = 0
    rating: Optional[int] = None
    feedback: Optional[str] = None
    credits_earned: Optional[int] = None

    class Config:
        from_attributes = True


class MatchRequest(BaseModel):
    activity: str = "tutoring"


class MatchResult(BaseModel):
    matched: bool
    session: Optional[TutoringSessionResponse] = None
    help_request: Optional[HelpRequestResponse] = None


class SkillsUpdate(BaseModel):
    skills: List[str]

    @field_validator("skills")
    @classmethod
    def clean(cls, v: List[str]) -> List[str]:
        return _clean_names(v)


class GoalsUpdate(BaseModel):
    goals: List[str]

    @field_validator("goals")
    @classmethod
    def clean(cls, v: List[str]) -> List[str]:
        return _clean_names(v)


class TimebankProfile(BaseModel):
    user_id: str
    tutor_skills: List[str] = []
    learning_goals: List[str] = []


class TimebankSummary(BaseModel):
    balance: int
    recent_transactions: List[TransactionResponse] = []
    active_session: Optional[TutoringSessionResponse] = None
    unread_notifications: int = 0
    tutor_skills: List[str] = []
    learning_goals: List[str] = []
