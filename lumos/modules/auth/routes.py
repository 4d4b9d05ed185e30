from fastapi import APIRouter, Depends, Security
from fastapi.security import HTTPAuthorizationCredentials
from lumos.database.supabase_client import get_supabase
from lumos.modules.auth.schemas import (
    SigninRequest, SignupRequest, TokenResponse, SignupResponse, TutorContextResponse
)
from lumos.modules.auth.service import AuthService
from lumos.core.dependencies import (
    security, get_auth_service, get_current_user_id, get_user_role, get_user_permissions
)
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


@router.post("/signup", response_model=SignupResponse, status_code=201)
async def signup(
    signup_data: SignupRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user, optionally with a role and onboarding profile"""
    return service.signup(signup_data)


@router.post("/signin", response_model=TokenResponse)
async def signin(
    signin_data: SigninRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Sign in and get access token"""
    return service.signin(signin_data)


@router.post("/signout", status_code=200)
async def signout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    service.signout(token)
    return {"message": "Signed out successfully"}


@router.get("/me")
async def get_current_user(
    current_user: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
    service: AuthService = Depends(get_auth_service)
):
    """Current user with role, permissions and tutor context (for frontend UI)."""
    cache: Dict = {}
    role = get_user_role(current_user["id"], supabase, cache)
    permissions = get_user_permissions(current_user["id"], supabase, cache)
    context = service.get_tutor_context(current_user["id"])
    return {
        **current_user,
        "role": role,
        "permissions": permissions,
        **context.model_dump(mode="json"),
    }


@router.get("/tutor-context", response_model=TutorContextResponse)
async def get_tutor_context(
    current_user: Dict = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service)
):
    return service.get_tutor_context(current_user["id"])
