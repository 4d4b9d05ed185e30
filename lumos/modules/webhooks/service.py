from supabase import Client
from lumos.modules.timebank.notifications import NotificationService
from lumos.modules.webhooks.schemas import N8nWebhook
from typing import Optional
import logging

logger = logging.getLogger(__name__)

# event -> (notification type, title, default message)
EVENT_NOTIFICATIONS = {
    "study_reminder": ("info", "Study Reminder", "Time for your next study session"),
    "mood_checkin": ("info", "Mood Check-in", "How are you feeling today?"),
    "deadline_alert": ("warning", "Deadline Alert", "A deadline is coming up soon"),
}


class WebhookService:
    def __init__(self, supabase: Client):
        self.notifications = NotificationService(supabase)

    def handle_n8n(self, payload: N8nWebhook) -> Optional[str]:
        """Turn an automation event into a user notification. Returns the notification id, if any."""
        if payload.event not in EVENT_NOTIFICATIONS:
            logger.warning(f"Unknown webhook event: {payload.event}")
            return None
        if not payload.user_id:
            logger.warning(f"Webhook event {payload.event} without user_id ignored")
            return None
        type, title, default_message = EVENT_NOTIFICATIONS[payload.event]
        try:
            notification = self.notifications.notify(
                payload.user_id, type, title, payload.message or default_message
            )
            logger.info(f"Webhook {payload.event} delivered to user {payload.user_id}")
            return notification.id
        except Exception as e:
            logger.error(f"Failed to deliver webhook {payload.event} to user {payload.user_id}: {e}")
            return None
