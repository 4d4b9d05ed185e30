from supabase import Client
from lumos.modules.profiles.models import PROFILE_TABLES
from lumos.modules.profiles.schemas import ProfileCreate, ProfileUpdate, ProfileResponse
from typing import Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

ROLE_COLUMNS = {
    "student": ("school", "subjects", "goals"),
    "volunteer": ("skills", "availability", "experience"),
    "teacher": ("school", "subjects"),
}


def is_unique_violation(error: Exception) -> bool:
    code = getattr(error, "code", None)
    return code == "23505" or "duplicate key" in str(error).lower()


def to_profile_response(user_id: str, role: str, row: Dict[str, Any]) -> ProfileResponse:
    """Collapse a role-specific row into the unified profile shape"""
    extras = {
        "phone": row.get("phone"),
        "school": row.get("school"),
        "subjects": row.get("subjects") if role != "volunteer" else row.get("skills"),
        "goals": row.get("goals"),
        "experience": row.get("experience"),
    }
    if row.get("age") is not None:
        extras["age"] = row["age"]
    if row.get("mbti"):
        extras["mbti"] = row["mbti"]
    if role == "volunteer" and row.get("availability"):
        extras["availability"] = row["availability"]
    return ProfileResponse(
        user_id=user_id,
        role=role,
        name=row.get("full_name") or "",
        bio=row.get("goals") or row.get("experience"),
        extras=extras,
    )


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_role(self, user_id: str) -> Optional[str]:
        """Get the user's role, None when onboarding has not happened"""
        try:
            result = self.supabase.table("user_roles")\
                .select("role_id")\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
            if not result.data:
                return None
            return result.data[0]["role_id"]
        except Exception as e:
            logger.error(f"Error getting role for user {user_id}: {e}")
            return None

    def ensure_role(self, user_id: str, role: str) -> str:
        """Insert the role once; a different existing role is a conflict"""
        current = self.get_role(user_id)
        if current and current != role:
            raise HTTPException(status_code=409, detail=f"User already registered as {current}")
        if current == role:
            return role
        try:
            self.supabase.table("user_roles").insert({
                "user_id": user_id,
                "role_id": role
            }).execute()
        except Exception as e:
            if not is_unique_violation(e):
                raise HTTPException(status_code=500, detail=f"Failed to set role: {str(e)}")
            logger.debug(f"Role for user {user_id} already present")
        return role

    def upsert_profile(self, user_id: str, role: str, profile: ProfileCreate) -> ProfileResponse:
        """Create or replace the role-specific profile row"""
        try:
            row = {
                "user_id": user_id,
                "full_name": profile.full_name,
                "phone": profile.phone,
                "updated_at": datetime.utcnow().isoformat()
            }
            data = profile.model_dump()
            for column in ROLE_COLUMNS[role]:
                row[column] = data[column]
            result = self.supabase.table(PROFILE_TABLES[role])\
                .upsert(row, on_conflict="user_id")\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save profile")
            return to_profile_response(user_id, role, result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_profile(self, user_id: str, role: str, profile: ProfileCreate) -> ProfileResponse:
        """Onboarding: role first, then profile"""
        self.ensure_role(user_id, role)
        response = self.upsert_profile(user_id, role, profile)
        logger.info(f"Created {role} profile for user {user_id}")
        return response

    def get_profile_row(self, user_id: str, role: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table(PROFILE_TABLES[role])\
            .select("*")\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def get_profile(self, user_id: str) -> ProfileResponse:
        """Get unified profile for any role"""
        role = self.get_role(user_id)
        if not role:
            raise HTTPException(status_code=404, detail="Profile not found")
        try:
            row = self.get_profile_row(user_id, role)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not row:
            raise HTTPException(status_code=404, detail="Profile not found")
        return to_profile_response(user_id, role, row)

    def find_profile(self, user_id: str) -> Optional[ProfileResponse]:
        """Like get_profile but None instead of 404"""
        try:
            return self.get_profile(user_id)
        except HTTPException as e:
            if e.status_code == 404:
                return None
            raise

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update profile fields on the table that matches the user's role"""
        role = self.get_role(user_id)
        if not role:
            raise HTTPException(status_code=404, detail="Profile not found")
        try:
            update_data = {"updated_at": datetime.utcnow().isoformat()}
            if profile_data.name is not None:
                update_data["full_name"] = profile_data.name
            if profile_data.phone is not None:
                update_data["phone"] = profile_data.phone
            if profile_data.age is not None:
                update_data["age"] = profile_data.age
            if profile_data.mbti is not None:
                update_data["mbti"] = profile_data.mbti
            for key, value in (profile_data.extras or {}).items():
                # volunteers read skills back as subjects
                if role == "volunteer" and key == "subjects":
                    key = "skills"
                if key in ROLE_COLUMNS[role]:
                    update_data[key] = value

            result = self.supabase.table(PROFILE_TABLES[role])\
                .update(update_data)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")
            return to_profile_response(user_id, role, result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_display_name(self, user_id: str) -> Optional[str]:
        profile = self.find_profile(user_id)
        if profile and profile.name:
            return profile.name
        return None
