"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from lumos.database.supabase_client import get_supabase
from lumos.modules.auth.service import AuthService
from lumos.modules.profiles.service import ProfileService
from lumos.config.roles_config import get_role_permissions
from supabase import Client
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (role, permission names)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return user_data


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(optional_security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[dict]:
    """Like get_current_user_id, but anonymous callers get None instead of 401/403"""
    if credentials is None:
        return None
    try:
        return auth_service.get_current_user(credentials.credentials)
    except HTTPException:
        return None


def get_user_role(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """Return the user's role from user_roles. Uses request-scoped cache when provided."""
    if cache is not None and "role" in cache:
        return cache["role"]
    role = ProfileService(supabase).get_role(user_id)
    if cache is not None:
        cache["role"] = role
    return role


def get_user_permissions(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> List[str]:
    """Get all permissions for a user through their role. Populates request-scoped cache when provided."""
    if cache is not None and "permission_names" in cache:
        return cache["permission_names"]
    names = get_role_permissions(get_user_role(user_id, supabase, cache))
    if cache is not None:
        cache["permission_names"] = names
    return names


def require_permission(required_permission: str):
    """Factory function to create permission check dependency"""
    def check_permission(
        request: Request,
        user_data: dict = Depends(get_current_user_id),
        supabase: Client = Depends(get_supabase)
    ) -> dict:
        """Dependency to check if user has required permission"""
        cache = _get_request_cache(request)
        user_permissions = get_user_permissions(user_data["id"], supabase, cache)
        if required_permission not in user_permissions:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {required_permission}"
            )
        return user_data
    return check_permission
