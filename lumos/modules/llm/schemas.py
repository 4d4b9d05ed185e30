from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from lumos.modules.preferences.schemas import TutorPreferences


class GenerateRequest(BaseModel):
    message: str = Field(..., min_length=1)
    preferences: Optional[TutorPreferences] = None
    session_id: Optional[str] = None
    language: Optional[str] = None


class GenerateResponse(BaseModel):
    response: str
    emotional_state: str = "neutral"


class ChatProxyRequest(BaseModel):
    messages: Any = None
    model: Optional[str] = None
    temperature: Optional[float] = 0.7
    max_tokens: Optional[int] = 1000

    def message_list(self) -> Optional[List[Dict[str, Any]]]:
        return self.messages if isinstance(self.messages, list) else None
