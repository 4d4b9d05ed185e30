from pydantic import BaseModel, Field
from typing import Optional, List


class TutorPreferences(BaseModel):
    year: str = "Year 1"
    major: str = "Computer Science"
    university: str = "UM"
    study_goals: str = "exam_prep"
    subjects: List[str] = []
    explanation_style: str = "step-by-step"
    difficulty_start: str = "beginner"
    response_style: str = "encouraging"
    language: str = "English"
    study_time: str = "evening"
    session_length: str = "30min"
    confidence_level: str = "medium"
    need_encouragement: bool = True
    prefer_step_by_step: bool = True
    like_examples: bool = True
    voice_enabled: bool = False
    notifications: bool = True
    dark_mode: bool = False
    directness: Optional[int] = Field(None, ge=1, le=5)


class PreferencesStatus(BaseModel):
    complete: bool
    missing: List[str] = []


class TutorOptions(BaseModel):
    lang: str
    style: str
    difficulty: str
    subjects: List[str]
    response_style: str
    need_encouragement: bool
