import hashlib
import time
import logging
from supabase import Client
from lumos.modules.auth.schemas import (
    SigninRequest, SignupRequest, TokenResponse, SignupResponse, TutorContextResponse
)
from lumos.modules.profiles.schemas import ProfileCreate
from lumos.modules.profiles.service import ProfileService
from lumos.modules.preferences.service import PreferencesService
from lumos.modules.conversations.service import ConversationService
from fastapi import HTTPException
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache():
    _AUTH_USER_CACHE.clear()


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def signup(self, signup_data: SignupRequest) -> SignupResponse:
        """Register a new user and, when a session comes back, finish onboarding right away"""
        user_metadata = {}
        if signup_data.role and signup_data.profile:
            user_metadata["pending_profile"] = {
                "role": signup_data.role,
                "profile": signup_data.profile.model_dump()
            }
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": signup_data.email,
                "password": signup_data.password,
                "options": {
                    "data": user_metadata
                }
            })
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            raise HTTPException(status_code=500, detail=f"Signup failed: {error_message}")

        if not auth_response.user:
            raise HTTPException(status_code=400, detail="Failed to register user")

        user = auth_response.user
        email = user.email or signup_data.email
        if not auth_response.session:
            logger.info(f"User {user.id} signed up, waiting for email confirmation")
            return SignupResponse(
                user_id=user.id,
                email=email,
                role=signup_data.role,
                needs_email_confirm=True,
                message="Check your email to confirm your account"
            )

        if signup_data.role:
            profiles = ProfileService(self.supabase)
            if signup_data.profile:
                profiles.create_profile(user.id, signup_data.role, signup_data.profile)
                self._clear_pending_profile(user.id)
            else:
                profiles.ensure_role(user.id, signup_data.role)

        return SignupResponse(
            user_id=user.id,
            email=email,
            role=signup_data.role,
            access_token=auth_response.session.access_token,
            message="User registered successfully"
        )

    def signin(self, signin_data: SigninRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": signin_data.email,
                "password": signin_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid email or password")
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Sign in failed: {error_message}")

        user = auth_response.user
        self.finish_pending_profile(user.id, user.user_metadata)
        return TokenResponse(
            access_token=auth_response.session.access_token,
            token_type="bearer",
            expires_in=getattr(auth_response.session, "expires_in", None),
            user_id=user.id,
            email=user.email or signin_data.email
        )

    def finish_pending_profile(self, user_id: str, user_metadata: Optional[Dict[str, Any]]) -> bool:
        """Write the onboarding profile parked at signup. Returns True when one was created."""
        pending = (user_metadata or {}).get("pending_profile")
        if not pending:
            return False
        profiles = ProfileService(self.supabase)
        created = False
        try:
            if profiles.get_role(user_id) is None:
                profiles.create_profile(user_id, pending["role"], ProfileCreate(**pending["profile"]))
                created = True
        except Exception as e:
            logger.warning(f"Could not finish pending profile for user {user_id}: {e}")
            return False
        self._clear_pending_profile(user_id)
        return created

    def _clear_pending_profile(self, user_id: str):
        try:
            self.supabase.auth.update_user({"data": {"pending_profile": None}})
        except Exception as e:
            logger.warning(f"Could not clear pending profile for user {user_id}: {e}")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
                "created_at": user.created_at,
                "updated_at": user.updated_at
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def signout(self, token: str) -> bool:
        """Sign out using Supabase Auth and drop the cached user for this token"""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            # Supabase tokens are stateless JWTs; they still expire on their own
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False

    def get_tutor_context(self, user_id: str, message_limit: int = 20) -> TutorContextResponse:
        """Profile, preferences and the latest messages (oldest first) for a signed-in user"""
        profile = ProfileService(self.supabase).find_profile(user_id)
        preferences = PreferencesService(self.supabase).get_preferences(user_id)
        messages = ConversationService(self.supabase).recent_messages(user_id, message_limit)
        return TutorContextResponse(
            profile=profile,
            preferences=preferences.model_dump(),
            recent_messages=[m.model_dump(mode="json") for m in reversed(messages)],
        )
