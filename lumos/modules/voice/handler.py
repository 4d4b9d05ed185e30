"""Voice tutoring over a WebSocket: audio in, streamed tutor text out."""
import base64
import binascii
import logging
import re
import time
import uuid
from typing import Any, Dict, Optional

from fastapi import HTTPException
from supabase import Client

from lumos.config import settings
from lumos.modules.auth.service import AuthService
from lumos.modules.conversations.schemas import AnalyticsCreate
from lumos.modules.conversations.service import ConversationService
from lumos.modules.llm.openrouter_client import OpenRouterClient
from lumos.modules.llm.service import LLMService
from lumos.modules.profiles.service import ProfileService
from lumos.modules.voice import session_registry
from lumos.modules.voice.schemas import InitSessionMessage
from lumos.modules.voice.session_registry import VoiceConnection
from lumos.modules.voice.stt import STTService

logger = logging.getLogger(__name__)

VOICE_SESSION_TITLE = "Lumos • Voice Session"
DEFAULT_GREETING = "Hello! I'm Lumos, your AI assistant. How can I help you today?"
SENTENCE_END = re.compile(r"[.!?]\s*$")


def greeting_for(name: Optional[str]) -> str:
    if name:
        return f"Hello {name}! I'm Lumos, your AI assistant. How can I help you today?"
    return DEFAULT_GREETING


class VoiceSessionHandler:
    """State and message handling for one WebSocket connection"""

    def __init__(
        self,
        websocket: Any,
        supabase: Client,
        client: Optional[OpenRouterClient] = None,
        stt: Optional[STTService] = None,
    ):
        self.websocket = websocket
        self.supabase = supabase
        self.llm = LLMService(supabase, client)
        self.stt = stt or STTService()
        self.connection: Optional[VoiceConnection] = None

    @property
    def user_id(self) -> Optional[str]:
        return self.connection.user_id if self.connection else None

    async def send(self, message_type: str, **payload):
        await self.websocket.send_json({"type": message_type, **payload})

    async def handle(self, data: Dict[str, Any]):
        """Dispatch one decoded client message"""
        if self.connection:
            self.connection.touch()
        message_type = data.get("type")
        try:
            if message_type == "init_session":
                await self.init_session(InitSessionMessage(**data))
            elif message_type == "process_audio":
                await self.process_audio(data.get("audio"))
            elif message_type == "clear_conversation":
                await self.clear_conversation()
            elif message_type == "get_analytics":
                await self.send_analytics()
            else:
                logger.warning(f"Unknown voice message type: {message_type}")
        except Exception as e:
            logger.error(f"Voice message error: {e}")
            await self.send("error", message="Sorry, I encountered an error. Please try again.")

    def verify_token(self, token: str) -> Optional[str]:
        try:
            return AuthService(self.supabase).get_current_user(token)["id"]
        except HTTPException as e:
            logger.warning(f"Voice token verification failed: {e.detail}")
            return None

    def _register(self, connection_id: Optional[str] = None) -> VoiceConnection:
        if self.connection:
            session_registry.unregister(self.connection.connection_id)
        self.connection = VoiceConnection(connection_id=connection_id or str(uuid.uuid4()), websocket=self.websocket)
        session_registry.register(self.connection)
        return self.connection

    async def init_session(self, message: InitSessionMessage):
        if message.token:
            user_id = self.verify_token(message.token)
        else:
            user_id = message.userId
        connection = self._register(message.sessionId)
        connection.user_id = user_id

        if user_id:
            try:
                session = ConversationService(self.supabase).create_session(
                    user_id,
                    VOICE_SESSION_TITLE,
                    {"channel": "voice", "ws_id": connection.connection_id, "user_agent": message.userAgent or "unknown"},
                )
                connection.db_session_id = session.id
            except Exception as e:
                logger.error(f"Failed to create voice session for user {user_id}: {e}")

        name = None
        if user_id:
            try:
                name = ProfileService(self.supabase).get_display_name(user_id)
            except Exception as e:
                logger.debug(f"No profile name for user {user_id}: {e}")
        logger.info(f"Voice session {connection.connection_id} started (user: {user_id or 'anonymous'})")
        await self.send("session_initialized", sessionId=connection.connection_id, greeting=greeting_for(name))

    async def process_audio(self, audio: Optional[str]):
        connection = self.connection or self._register()
        if audio:
            try:
                self.stt.add_chunk(base64.b64decode(audio))
            except (binascii.Error, ValueError):
                logger.warning("Discarding audio chunk that is not valid base64")

        text = await self.stt.transcribe()
        if not text.strip():
            await self.send("no_speech_detected", message="I didn't hear anything. Could you try speaking again?")
            return

        await self.send("processing_start", message="Got it, thinking...")
        await self.send("stream_start", message="Starting response...")
        full_response = ""
        sentence = ""
        try:
            async for token in self.llm.stream(text, connection.user_id, session_id=connection.db_session_id):
                full_response += token
                sentence += token
                if SENTENCE_END.search(sentence):
                    await self.send("stream_chunk", text=sentence.strip(), is_complete=False)
                    sentence = ""
            if sentence.strip():
                await self.send("stream_chunk", text=sentence.strip(), is_complete=False)
        except Exception as e:
            logger.error(f"Voice streaming error: {e}")
            await self.send("error", message="Sorry, I encountered an error. Could you try again?")
            return

        emotional_state = self.llm.analyze_emotional_state()
        await self.send("stream_complete", full_text=full_response, emotional_state=emotional_state)
        self.store_analytics(text, full_response, emotional_state)

    def store_analytics(self, user_text: str, reply: str, emotional_state: str):
        connection = self.connection
        if not connection or not connection.db_session_id or not connection.user_id:
            return
        try:
            ConversationService(self.supabase).add_analytics(
                connection.db_session_id,
                connection.user_id,
                AnalyticsCreate(
                    emotion=emotional_state,
                    # character count stands in for a token count
                    tokens_used=len(reply),
                    duration_sec=round(time.monotonic() - connection.started_at),
                    metrics={
                        "model": settings.openrouter_model,
                        "response_length": len(reply),
                        "user_message_length": len(user_text),
                    },
                ),
            )
        except Exception as e:
            logger.error(f"Failed to store voice analytics: {e}")

    async def clear_conversation(self):
        self.llm.clear_history()
        self.stt.clear_buffer()
        await self.send("conversation_cleared")

    async def send_analytics(self):
        connection = self.connection
        messages = len(self.llm.window)
        duration = round(time.monotonic() - connection.started_at) if connection else 0
        if connection and connection.db_session_id and connection.user_id:
            try:
                summary = ConversationService(self.supabase).get_session_summary(
                    connection.db_session_id, connection.user_id
                )
                messages = summary.total_messages
            except Exception as e:
                logger.warning(f"Could not load voice session summary: {e}")
        await self.send("analytics", data={"messages": messages, "duration": duration})

    def close(self):
        """Connection gone: drop audio, end the stored session, unregister"""
        self.stt.clear_buffer()
        connection = self.connection
        if connection is None:
            return
        if connection.db_session_id and connection.user_id:
            try:
                ConversationService(self.supabase).end_session(connection.db_session_id, connection.user_id)
            except Exception as e:
                logger.error(f"Failed to end voice session {connection.db_session_id}: {e}")
        session_registry.unregister(connection.connection_id)
        logger.info(f"Voice session {connection.connection_id} closed")
