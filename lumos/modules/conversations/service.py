from supabase import Client
from lumos.modules.conversations.schemas import (
    SessionResponse, MessageResponse, AnalyticsCreate, AnalyticsResponse, SessionSummary
)
from typing import List, Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime, timedelta
from collections import Counter
import logging

logger = logging.getLogger(__name__)


def default_session_title() -> str:
    return f"Lumos • {datetime.utcnow().strftime('%d %b %Y')}"


class ConversationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_session(self, user_id: str, title: Optional[str] = None, meta: Optional[Dict[str, Any]] = None) -> SessionResponse:
        """Create a new chat or voice session"""
        try:
            result = self.supabase.table("sessions").insert({
                "user_id": user_id,
                "title": title or default_session_title(),
                "meta": meta or {},
                "started_at": datetime.utcnow().isoformat()
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create session")
            return SessionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_session(self, session_id: str, user_id: str) -> SessionResponse:
        """Get session by ID, only for its owner"""
        try:
            result = self.supabase.table("sessions")\
                .select("*")\
                .eq("id", session_id)\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Session not found")
            return SessionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def end_session(self, session_id: str, user_id: str) -> SessionResponse:
        """Mark session as ended"""
        try:
            result = self.supabase.table("sessions")\
                .update({"ended_at": datetime.utcnow().isoformat()})\
                .eq("id", session_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Session not found")
            return SessionResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_sessions(self, user_id: str, limit: int = 20, offset: int = 0) -> List[SessionResponse]:
        """List the user's sessions, newest first"""
        try:
            result = self.supabase.table("sessions")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("started_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            return [SessionResponse(**s) for s in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_messages(self, session_id: str, user_id: str) -> List[MessageResponse]:
        """Messages of one session in conversation order"""
        self.get_session(session_id, user_id)
        try:
            result = self.supabase.table("messages")\
                .select("*")\
                .eq("session_id", session_id)\
                .order("idx")\
                .execute()
            return [MessageResponse(**m) for m in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _next_idx(self, user_id: str) -> int:
        result = self.supabase.table("messages")\
            .select("idx")\
            .eq("user_id", user_id)\
            .order("idx", desc=True)\
            .limit(1)\
            .execute()
        if not result.data:
            return 0
        return (result.data[0].get("idx") or 0) + 1

    def add_message(self, user_id: str, role: str, content: str, session_id: Optional[str] = None) -> MessageResponse:
        """Append a message to the user's history"""
        try:
            result = self.supabase.table("messages").insert({
                "user_id": user_id,
                "session_id": session_id,
                "role": role,
                "content": content,
                "ts": datetime.utcnow().isoformat(),
                "idx": self._next_idx(user_id)
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to store message")
            return MessageResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def recent_messages(self, user_id: str, limit: int = 10) -> List[MessageResponse]:
        """Most recent messages, newest first"""
        try:
            result = self.supabase.table("messages")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("idx", desc=True)\
                .limit(limit)\
                .execute()
            return [MessageResponse(**m) for m in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def history(self, user_id: str, limit: int = 10) -> List[Dict[str, str]]:
        """Last `limit` messages as chat turns in chronological order"""
        messages = self.recent_messages(user_id, limit)
        return [{"role": m.role, "content": m.content} for m in reversed(messages)]

    def add_analytics(self, session_id: str, user_id: str, analytics: AnalyticsCreate) -> AnalyticsResponse:
        try:
            result = self.supabase.table("session_analytics").insert({
                "session_id": session_id,
                "user_id": user_id,
                "emotion": analytics.emotion,
                "tokens_used": analytics.tokens_used,
                "duration_sec": analytics.duration_sec,
                "metrics": analytics.metrics or {},
                "created_at": datetime.utcnow().isoformat()
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to store analytics")
            return AnalyticsResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_session_summary(self, session_id: str, user_id: str) -> SessionSummary:
        """Message count, time spent and emotion breakdown for one session"""
        session = self.get_session(session_id, user_id)
        messages = self.list_messages(session_id, user_id)
        try:
            result = self.supabase.table("session_analytics")\
                .select("*")\
                .eq("session_id", session_id)\
                .execute()
            rows = result.data or []
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        emotions = Counter(row.get("emotion") or "neutral" for row in rows)
        most_frequent = emotions.most_common(1)[0][0] if emotions else "neutral"
        duration = sum(float(row.get("duration_sec") or 0) for row in rows)
        if not duration and session.ended_at:
            duration = (session.ended_at - session.started_at).total_seconds()
        return SessionSummary(
            session_id=session_id,
            total_messages=len(messages),
            duration_sec=duration,
            tokens_used=sum(int(row.get("tokens_used") or 0) for row in rows),
            emotion_breakdown=dict(emotions),
            most_frequent_emotion=most_frequent,
            messages=messages,
        )

    def cleanup_old_sessions(self, days_old: int = 30) -> int:
        """Delete sessions started more than `days_old` days ago. Returns the number removed."""
        cutoff = (datetime.utcnow() - timedelta(days=days_old)).isoformat()
        try:
            result = self.supabase.table("sessions")\
                .delete()\
                .lt("started_at", cutoff)\
                .execute()
            removed = len(result.data or [])
            logger.info(f"Removed {removed} session(s) older than {days_old} days")
            return removed
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
