from pydantic import BaseModel
from typing import Optional


class N8nWebhook(BaseModel):
    event: Optional[str] = None
    user_id: Optional[str] = None
    message: Optional[str] = None


class WebhookAck(BaseModel):
    status: str = "Webhook received successfully"
