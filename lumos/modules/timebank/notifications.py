from supabase import Client
from lumos.modules.timebank.schemas import NotificationCreate, NotificationResponse
from typing import List
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

MAX_NOTIFICATIONS = 10


class NotificationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def add(self, user_id: str, notification: NotificationCreate) -> NotificationResponse:
        """Store a notification and drop anything beyond the 10 most recent"""
        try:
            result = self.supabase.table("timebank_notifications").insert({
                "user_id": user_id,
                "type": notification.type,
                "title": notification.title,
                "message": notification.message,
                "read": False,
                "created_at": datetime.utcnow().isoformat()
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create notification")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        self._trim(user_id)
        return NotificationResponse(**result.data[0])

    def notify(self, user_id: str, type: str, title: str, message: str) -> NotificationResponse:
        return self.add(user_id, NotificationCreate(type=type, title=title, message=message))

    def _trim(self, user_id: str):
        try:
            result = self.supabase.table("timebank_notifications")\
                .select("id")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            stale = [row["id"] for row in (result.data or [])[MAX_NOTIFICATIONS:]]
            if stale:
                self.supabase.table("timebank_notifications").delete().in_("id", stale).execute()
        except Exception as e:
            logger.warning(f"Could not trim notifications for user {user_id}: {e}")

    def list(self, user_id: str) -> List[NotificationResponse]:
        """Newest first"""
        try:
            result = self.supabase.table("timebank_notifications")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .limit(MAX_NOTIFICATIONS)\
                .execute()
            return [NotificationResponse(**n) for n in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def unread_count(self, user_id: str) -> int:
        return sum(1 for n in self.list(user_id) if not n.read)

    def mark_read(self, notification_id: str, user_id: str) -> NotificationResponse:
        try:
            result = self.supabase.table("timebank_notifications")\
                .update({"read": True})\
                .eq("id", notification_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Notification not found")
            return NotificationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def clear(self, user_id: str):
        try:
            self.supabase.table("timebank_notifications").delete().eq("user_id", user_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
