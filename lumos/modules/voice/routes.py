import json
import logging

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
from supabase import Client
from typing import List

from lumos.database.supabase_client import get_supabase
from lumos.modules.llm.openrouter_client import OpenRouterClient
from lumos.modules.llm.routes import get_openrouter_client
from lumos.modules.voice.handler import VoiceSessionHandler
from lumos.modules.voice.schemas import TTSRequest, VoiceInfo
from lumos.modules.voice.stt import STTService
from lumos.modules.voice.tts import TTSService, list_voices

logger = logging.getLogger(__name__)

router = APIRouter(tags=["voice"])


def get_stt_service() -> STTService:
    return STTService()


def get_tts_service() -> TTSService:
    return TTSService()


@router.post("/tts")
async def text_to_speech(body: TTSRequest, tts: TTSService = Depends(get_tts_service)):
    """Synthesize speech for the given text as audio/wav"""
    if not body.text or not body.text.strip():
        raise HTTPException(status_code=400, detail="Text is required")
    try:
        audio = await run_in_threadpool(tts.synthesize, body.text, body.voice)
    except Exception as e:
        logger.error(f"TTS error: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate speech")
    return Response(content=audio, media_type="audio/wav")


@router.get("/tts/voices", response_model=List[VoiceInfo])
async def voices():
    return list_voices()


@router.websocket("/voice/ws")
async def voice_socket(
    websocket: WebSocket,
    supabase: Client = Depends(get_supabase),
    client: OpenRouterClient = Depends(get_openrouter_client),
    stt: STTService = Depends(get_stt_service)
):
    """Voice tutoring session; see VoiceSessionHandler for the message protocol"""
    await websocket.accept()
    handler = VoiceSessionHandler(websocket, supabase, client, stt)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
            except ValueError:
                await handler.send("error", message="Sorry, I encountered an error. Please try again.")
                continue
            if not isinstance(data, dict):
                await handler.send("error", message="Sorry, I encountered an error. Please try again.")
                continue
            await handler.handle(data)
    except WebSocketDisconnect:
        logger.debug("Voice client disconnected")
    finally:
        handler.close()
