from supabase import Client
from lumos.modules.preferences.schemas import TutorPreferences, PreferencesStatus, TutorOptions
from typing import Optional, List, Dict, Any
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

# Fields a student must fill in before the tutor can personalise answers
REQUIRED_FIELDS = [
    ("subjects", "Subjects"),
    ("explanation_style", "Explanation Style"),
    ("difficulty_start", "Difficulty Level"),
    ("response_style", "Response Style"),
    ("language", "Language"),
]


def get_missing_fields(prefs: Optional[TutorPreferences]) -> List[str]:
    if prefs is None:
        return ["All preferences"]
    missing = []
    for field, label in REQUIRED_FIELDS:
        value = getattr(prefs, field)
        if isinstance(value, list):
            if not value:
                missing.append(label)
        elif not value or not str(value).strip():
            missing.append(label)
    return missing


def prefs_complete(prefs: Optional[TutorPreferences]) -> bool:
    return not get_missing_fields(prefs)


def tutor_options(prefs: TutorPreferences) -> TutorOptions:
    """Subset of preferences the tutor prompt is built from"""
    return TutorOptions(
        lang=prefs.language,
        style=prefs.explanation_style,
        difficulty=prefs.difficulty_start,
        subjects=list(prefs.subjects),
        response_style=prefs.response_style,
        need_encouragement=prefs.need_encouragement,
    )


class PreferencesService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_stored_preferences(self, user_id: str) -> Optional[TutorPreferences]:
        """Stored document merged over defaults, None when the user never saved any"""
        try:
            result = self.supabase.table("user_preferences")\
                .select("preferences")\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
            if not result.data:
                return None
            stored: Dict[str, Any] = result.data[0].get("preferences") or {}
            return TutorPreferences(**stored)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_preferences(self, user_id: str) -> TutorPreferences:
        return self.get_stored_preferences(user_id) or TutorPreferences()

    def save_preferences(self, user_id: str, prefs: TutorPreferences) -> TutorPreferences:
        """Replace the user's preferences document"""
        try:
            result = self.supabase.table("user_preferences")\
                .upsert({
                    "user_id": user_id,
                    "preferences": prefs.model_dump(),
                    "updated_at": datetime.utcnow().isoformat()
                }, on_conflict="user_id")\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save preferences")
            logger.info(f"Saved preferences for user {user_id}")
            return TutorPreferences(**(result.data[0].get("preferences") or {}))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def reset_preferences(self, user_id: str) -> TutorPreferences:
        """Forget stored preferences; the user falls back to defaults"""
        try:
            self.supabase.table("user_preferences")\
                .delete()\
                .eq("user_id", user_id)\
                .execute()
            return TutorPreferences()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_status(self, user_id: str) -> PreferencesStatus:
        prefs = self.get_stored_preferences(user_id)
        return PreferencesStatus(complete=prefs_complete(prefs), missing=get_missing_fields(prefs))
