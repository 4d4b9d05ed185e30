from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any, Literal

Role = Literal["student", "volunteer", "teacher"]


def _reject_blank_entries(values: List[str]) -> List[str]:
    cleaned = []
    for value in values:
        if not value or not value.strip():
            raise ValueError("entries must not be empty")
        cleaned.append(value.strip())
    return cleaned


class ProfileCreate(BaseModel):
    full_name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    school: Optional[str] = None
    subjects: List[str] = []  # student, teacher
    goals: Optional[str] = None  # student
    skills: List[str] = []  # volunteer
    availability: Optional[Dict[str, Any]] = None  # volunteer
    experience: Optional[str] = None  # volunteer

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("full_name must not be empty")
        return v.strip()

    @field_validator("subjects", "skills")
    @classmethod
    def no_blank_entries(cls, v: List[str]) -> List[str]:
        return _reject_blank_entries(v)


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    age: Optional[int] = Field(None, ge=1, le=120)
    mbti: Optional[str] = None
    extras: Optional[Dict[str, Any]] = None


class ProfileResponse(BaseModel):
    user_id: str
    role: Role
    name: str
    bio: Optional[str] = None
    extras: Dict[str, Any] = {}

    class Config:
        from_attributes = True


class RoleResponse(BaseModel):
    user_id: str
    role: Optional[Role] = None
