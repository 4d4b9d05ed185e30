import asyncio
import logging
from typing import AsyncIterator, Dict, List, Optional, Any, Tuple

import httpx
from supabase import Client

from lumos.config import settings
from lumos.modules.llm.openrouter_client import OpenRouterClient, OpenRouterError
from lumos.modules.llm import prompts
from lumos.modules.preferences.schemas import TutorPreferences
from lumos.modules.preferences.service import PreferencesService
from lumos.modules.profiles.service import ProfileService
from lumos.modules.conversations.service import ConversationService
from lumos.modules.academic.service import AcademicService

logger = logging.getLogger(__name__)

MAX_WINDOW_MESSAGES = 20
HISTORY_LOAD_LIMIT = 10

TROUBLE_REPLY = "I'm having trouble processing that right now. Could you try again?"
TIMEOUT_REPLY = "I'm taking a bit longer to respond. Let me give you a quick answer..."
BUSY_REPLY = "I'm a bit busy right now, but I'm here for you. What's on your mind?"
EMPTY_REPLY = "I'm sorry, I didn't catch that. Could you repeat?"


class LLMTimeout(Exception):
    pass


def fallback_reply(error: Exception) -> str:
    """Canned reply for a failed completion"""
    if isinstance(error, (LLMTimeout, httpx.TimeoutException, asyncio.TimeoutError)):
        return TIMEOUT_REPLY
    if isinstance(error, OpenRouterError) and error.is_rate_limited:
        return BUSY_REPLY
    text = str(error).lower()
    if "timeout" in text:
        return TIMEOUT_REPLY
    if "rate limit" in text or "quota" in text:
        return BUSY_REPLY
    return TROUBLE_REPLY


class ConversationWindow:
    """Most recent user/assistant turns, capped at max_messages"""

    def __init__(self, max_messages: int = MAX_WINDOW_MESSAGES):
        self.max_messages = max_messages
        self.messages: List[Dict[str, str]] = []

    def add(self, role: str, content: str):
        self.messages.append({"role": role, "content": content})
        if len(self.messages) > self.max_messages:
            self.messages = self.messages[-self.max_messages:]

    def replace(self, history: List[Dict[str, str]]):
        turns = [m for m in history if m.get("role") in ("user", "assistant")]
        self.messages = turns[-self.max_messages:]

    def clear(self):
        self.messages = []

    def __len__(self):
        return len(self.messages)


class LLMService:
    """Tutor conversation for one caller: a request, or one voice connection."""

    def __init__(self, supabase: Optional[Client] = None, client: Optional[OpenRouterClient] = None):
        self.supabase = supabase
        self.client = client or OpenRouterClient()
        self.window = ConversationWindow()

    def load_history(self, user_id: str):
        if self.supabase is None:
            return
        try:
            history = ConversationService(self.supabase).history(user_id, HISTORY_LOAD_LIMIT)
            self.window.replace(history)
            logger.debug(f"Loaded {len(history)} message(s) for user {user_id}")
        except Exception as e:
            logger.error(f"Error loading conversation history for user {user_id}: {e}")

    def load_context(
        self, user_id: Optional[str], preferences: Optional[TutorPreferences]
    ) -> Tuple[Optional[Dict[str, Any]], Optional[TutorPreferences], Optional[Dict[str, Any]]]:
        """Profile, preferences and academic context; caller-supplied preferences win"""
        if not user_id or self.supabase is None:
            return None, preferences, None
        profile = None
        academic = None
        try:
            found = ProfileService(self.supabase).find_profile(user_id)
            profile = found.model_dump() if found else None
            if preferences is None:
                preferences = PreferencesService(self.supabase).get_stored_preferences(user_id)
            academic = AcademicService(self.supabase).get_context(user_id).model_dump()
        except Exception as e:
            logger.warning(f"Could not load tutor context for user {user_id}: {e}")
        return profile, preferences, academic

    def build_messages(
        self,
        message: str,
        user_id: Optional[str] = None,
        preferences: Optional[TutorPreferences] = None,
        language: Optional[str] = None,
        with_turn_instruction: bool = True,
    ) -> List[Dict[str, str]]:
        if user_id:
            self.load_history(user_id)
        self.window.add("user", message)
        profile, prefs, academic = self.load_context(user_id, preferences)
        messages = [{"role": "system", "content": prompts.build_tutor_prompt(profile, prefs, academic, language)}]
        if with_turn_instruction:
            should_challenge = prompts.detect_challenge_triggers(message)
            confidence = prompts.estimate_confidence(message)
            directness = prompts.resolve_directness(prefs)
            logger.debug(f"Challenge: {should_challenge}, confidence: {confidence}, directness: {directness}")
            messages.append({
                "role": "user",
                "content": f"Meta:\n{prompts.build_turn_instruction(should_challenge, confidence, directness)}"
            })
        return messages + list(self.window.messages)

    def store_exchange(self, user_id: Optional[str], message: str, reply: str, session_id: Optional[str] = None):
        if not user_id or self.supabase is None:
            return
        try:
            conversations = ConversationService(self.supabase)
            conversations.add_message(user_id, "user", message, session_id)
            conversations.add_message(user_id, "assistant", reply, session_id)
        except Exception as e:
            logger.error(f"Failed to store conversation for user {user_id}: {e}")

    async def generate(
        self,
        message: str,
        user_id: Optional[str] = None,
        preferences: Optional[TutorPreferences] = None,
        session_id: Optional[str] = None,
    ) -> str:
        """Single non-streamed tutor reply"""
        try:
            messages = self.build_messages(message, user_id, preferences, with_turn_instruction=False)
            reply = await self.client.complete(messages) or EMPTY_REPLY
        except Exception as e:
            logger.error(f"LLM error: {e}")
            return TROUBLE_REPLY
        self.window.add("assistant", reply)
        self.store_exchange(user_id, message, reply, session_id)
        return reply

    async def stream(
        self,
        message: str,
        user_id: Optional[str] = None,
        preferences: Optional[TutorPreferences] = None,
        language: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> AsyncIterator[str]:
        """Yield reply tokens; on failure yield one canned reply instead"""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + settings.llm_timeout_seconds
        full_response = ""
        try:
            messages = self.build_messages(message, user_id, preferences, language)
            async for token in self.client.stream(messages):
                if loop.time() > deadline:
                    raise LLMTimeout("LLM request timeout")
                full_response += token
                yield token
        except Exception as e:
            logger.error(f"Streaming LLM error: {e}")
            yield fallback_reply(e)
            return
        self.window.add("assistant", full_response)
        self.store_exchange(user_id, message, full_response, session_id)

    def analyze_emotional_state(self) -> str:
        return prompts.analyze_emotional_state(self.window.messages)

    def clear_history(self):
        self.window.clear()
