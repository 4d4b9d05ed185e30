from fastapi import APIRouter, Depends
from lumos.database.supabase_client import get_supabase
from lumos.modules.profiles.schemas import ProfileCreate, ProfileUpdate, ProfileResponse, RoleResponse, Role
from lumos.modules.profiles.service import ProfileService
from lumos.core.dependencies import get_current_user_id
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user_data: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    """Get the caller's profile, whatever their role"""
    return service.get_profile(user_data["id"])


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    """Update the caller's profile"""
    return service.update_profile(user_data["id"], profile_data)


@router.get("/me/role", response_model=RoleResponse)
async def get_my_role(
    user_data: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    return RoleResponse(user_id=user_data["id"], role=service.get_role(user_data["id"]))


@router.post("/{role}", response_model=ProfileResponse, status_code=201)
async def create_profile(
    role: Role,
    profile_data: ProfileCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    """Onboard the caller as student, volunteer or teacher"""
    return service.create_profile(user_data["id"], role, profile_data)
