from pydantic import BaseModel
from typing import Optional, Literal

VoiceId = Literal["default", "male", "female", "warm", "professional"]


class TTSRequest(BaseModel):
    text: Optional[str] = None
    voice: VoiceId = "default"


class VoiceInfo(BaseModel):
    id: str
    name: str
    pitch: float
    description: str


class InitSessionMessage(BaseModel):
    token: Optional[str] = None
    userId: Optional[str] = None
    sessionId: Optional[str] = None
    userAgent: Optional[str] = None
