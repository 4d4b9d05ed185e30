from fastapi import APIRouter, Depends, Query
from lumos.database.supabase_client import get_supabase
from lumos.modules.conversations.schemas import (
    SessionCreate, SessionResponse, MessageCreate, MessageResponse,
    AnalyticsCreate, AnalyticsResponse, SessionSummary
)
from lumos.modules.conversations.service import ConversationService
from lumos.core.dependencies import get_current_user_id
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/conversations", tags=["conversations"])


def get_conversation_service(supabase: Client = Depends(get_supabase)) -> ConversationService:
    return ConversationService(supabase)


@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def create_session(
    session_data: SessionCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service)
):
    """Start a new session"""
    return service.create_session(user_data["id"], session_data.title, session_data.meta)


@router.get("/sessions", response_model=List[SessionResponse])
async def list_sessions(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_data: Dict = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service)
):
    return service.list_sessions(user_data["id"], limit=limit, offset=offset)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service)
):
    return service.get_session(session_id, user_data["id"])


@router.post("/sessions/{session_id}/end", response_model=SessionResponse)
async def end_session(
    session_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service)
):
    """End a session"""
    return service.end_session(session_id, user_data["id"])


@router.get("/sessions/{session_id}/messages", response_model=List[MessageResponse])
async def list_session_messages(
    session_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service)
):
    return service.list_messages(session_id, user_data["id"])


@router.post("/sessions/{session_id}/analytics", response_model=AnalyticsResponse, status_code=201)
async def add_session_analytics(
    session_id: str,
    analytics: AnalyticsCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service)
):
    service.get_session(session_id, user_data["id"])
    return service.add_analytics(session_id, user_data["id"], analytics)


@router.get("/sessions/{session_id}/summary", response_model=SessionSummary)
async def get_session_summary(
    session_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service)
):
    """Message count, duration and emotion breakdown"""
    return service.get_session_summary(session_id, user_data["id"])


@router.post("/messages", response_model=MessageResponse, status_code=201)
async def add_message(
    message: MessageCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service)
):
    """Store a message, optionally inside a session"""
    if message.session_id:
        service.get_session(message.session_id, user_data["id"])
    return service.add_message(user_data["id"], message.role, message.content, message.session_id)


@router.get("/messages/recent", response_model=List[MessageResponse])
async def recent_messages(
    limit: int = Query(10, ge=1, le=100),
    user_data: Dict = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service)
):
    """Most recent messages, newest first"""
    return service.recent_messages(user_data["id"], limit)
