from fastapi import APIRouter, Depends
from lumos.database.supabase_client import get_supabase
from lumos.modules.preferences.schemas import TutorPreferences, PreferencesStatus, TutorOptions
from lumos.modules.preferences.service import PreferencesService, tutor_options
from lumos.core.dependencies import get_current_user_id
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/preferences", tags=["preferences"])


def get_preferences_service(supabase: Client = Depends(get_supabase)) -> PreferencesService:
    return PreferencesService(supabase)


@router.get("", response_model=TutorPreferences)
async def get_preferences(
    user_data: Dict = Depends(get_current_user_id),
    service: PreferencesService = Depends(get_preferences_service)
):
    """Get stored preferences, or defaults when none were saved"""
    return service.get_preferences(user_data["id"])


@router.put("", response_model=TutorPreferences)
async def save_preferences(
    prefs: TutorPreferences,
    user_data: Dict = Depends(get_current_user_id),
    service: PreferencesService = Depends(get_preferences_service)
):
    """Replace preferences"""
    return service.save_preferences(user_data["id"], prefs)


@router.delete("", response_model=TutorPreferences)
async def reset_preferences(
    user_data: Dict = Depends(get_current_user_id),
    service: PreferencesService = Depends(get_preferences_service)
):
    """Reset preferences to defaults"""
    return service.reset_preferences(user_data["id"])


@router.get("/status", response_model=PreferencesStatus)
async def get_preferences_status(
    user_data: Dict = Depends(get_current_user_id),
    service: PreferencesService = Depends(get_preferences_service)
):
    """Whether onboarding preferences are complete, and which fields are missing"""
    return service.get_status(user_data["id"])


@router.get("/tutor-options", response_model=TutorOptions)
async def get_tutor_options(
    user_data: Dict = Depends(get_current_user_id),
    service: PreferencesService = Depends(get_preferences_service)
):
    return tutor_options(service.get_preferences(user_data["id"]))
