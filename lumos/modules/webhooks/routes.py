from fastapi import APIRouter, Depends, Header, HTTPException, Request
from lumos.config import settings
from lumos.database.supabase_client import get_service_supabase
from lumos.modules.webhooks.schemas import N8nWebhook, WebhookAck
from lumos.modules.webhooks.service import WebhookService
from supabase import Client
from typing import Any, Dict, Optional
import hmac
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def get_webhook_service(supabase: Client = Depends(get_service_supabase)) -> WebhookService:
    return WebhookService(supabase)


def verify_webhook_secret(x_webhook_secret: Optional[str] = Header(None)):
    """Shared secret from the automation workflows; only optional outside production"""
    expected = settings.n8n_webhook_secret
    if not expected:
        if settings.is_production:
            logger.error("N8N_WEBHOOK_SECRET is not set, rejecting webhook")
            raise HTTPException(status_code=401, detail="Invalid webhook secret")
        return
    if not x_webhook_secret or not hmac.compare_digest(x_webhook_secret, expected):
        logger.warning("Webhook rejected: bad or missing secret")
        raise HTTPException(status_code=401, detail="Invalid webhook secret")


@router.post("/n8n", response_model=WebhookAck, dependencies=[Depends(verify_webhook_secret)])
async def n8n_webhook(payload: N8nWebhook, service: WebhookService = Depends(get_webhook_service)):
    """Study reminders, mood check-ins and deadline alerts from the automation workflows"""
    service.handle_n8n(payload)
    return WebhookAck()


@router.post("/test")
async def test_webhook(request: Request) -> Dict[str, Any]:
    try:
        received = await request.json()
    except ValueError:
        received = None
    return {"message": "Test webhook working!", "received_data": received}
