from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Dict, Any
from lumos.modules.profiles.schemas import ProfileCreate, ProfileResponse, Role


class SigninRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    user_id: str
    email: str


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Optional[Role] = None
    profile: Optional[ProfileCreate] = None


class SignupResponse(BaseModel):
    user_id: str
    email: str
    role: Optional[Role] = None
    needs_email_confirm: bool = False
    access_token: Optional[str] = None
    message: str


class TutorContextResponse(BaseModel):
    profile: Optional[ProfileResponse] = None
    preferences: Dict[str, Any]
    recent_messages: List[Dict[str, Any]] = []
