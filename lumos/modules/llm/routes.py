from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from lumos.database.supabase_client import get_supabase
from lumos.modules.llm.schemas import GenerateRequest, GenerateResponse, ChatProxyRequest
from lumos.modules.llm.service import LLMService
from lumos.modules.llm.openrouter_client import OpenRouterClient, OpenRouterError
from lumos.core.dependencies import get_optional_user
from lumos.core.rate_limit import limiter
from lumos.config import settings
from supabase import Client
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["llm"])


def get_openrouter_client() -> OpenRouterClient:
    return OpenRouterClient()


def get_llm_service(
    supabase: Client = Depends(get_supabase),
    client: OpenRouterClient = Depends(get_openrouter_client)
) -> LLMService:
    return LLMService(supabase, client)


@router.post("/llm/generate", response_model=GenerateResponse)
@limiter.limit(settings.llm_rate_limit)
async def generate(
    request: Request,
    body: GenerateRequest,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: LLMService = Depends(get_llm_service)
):
    """Single tutor reply. Signed-in callers get their history, profile and preferences applied."""
    user_id = user_data["id"] if user_data else None
    reply = await service.generate(body.message, user_id, body.preferences, body.session_id)
    return GenerateResponse(response=reply, emotional_state=service.analyze_emotional_state())


@router.post("/llm/stream")
@limiter.limit(settings.llm_rate_limit)
async def stream(
    request: Request,
    body: GenerateRequest,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: LLMService = Depends(get_llm_service)
):
    """Tutor reply streamed as plain text"""
    user_id = user_data["id"] if user_data else None
    tokens = service.stream(body.message, user_id, body.preferences, body.language, body.session_id)
    return StreamingResponse(tokens, media_type="text/plain; charset=utf-8")


@router.post("/chat")
@limiter.limit(settings.llm_rate_limit)
async def chat_proxy(
    request: Request,
    body: ChatProxyRequest,
    client: OpenRouterClient = Depends(get_openrouter_client)
):
    """Forward a chat completion to OpenRouter with the server-side key"""
    messages = body.message_list()
    if messages is None:
        raise HTTPException(status_code=400, detail="Messages array is required")
    if not client.configured:
        raise HTTPException(status_code=500, detail="OpenRouter API key not configured")
    try:
        return await client.chat(
            messages,
            model=body.model or settings.openrouter_model,
            max_tokens=body.max_tokens,
            temperature=body.temperature,
        )
    except OpenRouterError as e:
        raise HTTPException(status_code=e.status_code, detail=f"OpenRouter API error: {e.message[:200]}")
    except Exception as e:
        logger.error(f"Chat proxy error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
