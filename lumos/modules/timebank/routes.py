from fastapi import APIRouter, Depends, HTTPException, Query
from lumos.database.supabase_client import get_supabase
from lumos.modules.timebank.schemas import (
    TransactionResponse, NotificationResponse, HelpRequestCreate, HelpRequestResponse,
    SessionStart, SessionEnd, TutoringSessionResponse, MatchRequest, MatchResult,
    SkillsUpdate, GoalsUpdate, TimebankProfile, TimebankSummary
)
from lumos.modules.timebank.service import TimebankService
from lumos.core.dependencies import get_current_user_id, require_permission
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/timebank", tags=["timebank"])


def get_timebank_service(supabase: Client = Depends(get_supabase)) -> TimebankService:
    return TimebankService(supabase)


@router.get("/summary", response_model=TimebankSummary)
async def get_summary(
    user_data: Dict = Depends(get_current_user_id),
    service: TimebankService = Depends(get_timebank_service)
):
    return service.summary(user_data["id"])


@router.get("/transactions", response_model=List[TransactionResponse])
async def list_transactions(
    limit: int = Query(20, ge=1, le=100),
    user_data: Dict = Depends(get_current_user_id),
    service: TimebankService = Depends(get_timebank_service)
):
    return service.transactions.list_transactions(user_data["id"], limit)


# ===== Notifications =====

@router.get("/notifications", response_model=List[NotificationResponse])
async def list_notifications(
    user_data: Dict = Depends(get_current_user_id),
    service: TimebankService = Depends(get_timebank_service)
):
    """The 10 most recent notifications"""
    return service.notifications.list(user_data["id"])


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: TimebankService = Depends(get_timebank_service)
):
    return service.notifications.mark_read(notification_id, user_data["id"])


@router.delete("/notifications", status_code=204)
async def clear_notifications(
    user_data: Dict = Depends(get_current_user_id),
    service: TimebankService = Depends(get_timebank_service)
):
    service.notifications.clear(user_data["id"])
    return None


# ===== Help requests (students) =====

@router.post("/help-requests", response_model=HelpRequestResponse, status_code=201)
async def create_help_request(
    body: HelpRequestCreate,
    user_data: Dict = Depends(require_permission("help_requests:create")),
    service: TimebankService = Depends(get_timebank_service)
):
    """Hold credits and wait for a volunteer; 402 when the balance is too low"""
    return service.help_requests.create(user_data["id"], body)


@router.get("/help-requests", response_model=List[HelpRequestResponse])
async def list_help_requests(
    user_data: Dict = Depends(get_current_user_id),
    service: TimebankService = Depends(get_timebank_service)
):
    return service.help_requests.list_for_student(user_data["id"])


@router.get("/help-requests/{request_id}", response_model=HelpRequestResponse)
async def get_help_request(
    request_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: TimebankService = Depends(get_timebank_service)
):
    request = service.help_requests.get(request_id)
    if user_data["id"] not in (request.student_id, request.volunteer_id):
        raise HTTPException(status_code=404, detail="Help request not found")
    return request


@router.post("/help-requests/{request_id}/cancel", response_model=HelpRequestResponse)
async def cancel_help_request(
    request_id: str,
    user_data: Dict = Depends(require_permission("help_requests:cancel")),
    service: TimebankService = Depends(get_timebank_service)
):
    return service.help_requests.cancel(request_id, user_data["id"])


# ===== Matching and sessions (volunteers, teachers) =====

@router.post("/match", response_model=MatchResult)
async def match(
    body: Optional[MatchRequest] = None,
    user_data: Dict = Depends(require_permission("tutoring:match")),
    service: TimebankService = Depends(get_timebank_service)
):
    """Pick up the oldest waiting request that fits the volunteer's skills"""
    activity = body.activity if body else "tutoring"
    return service.match(user_data["id"], activity)


@router.post("/match/cancel", status_code=204)
async def cancel_matching(
    user_data: Dict = Depends(require_permission("tutoring:match")),
    service: TimebankService = Depends(get_timebank_service)
):
    service.cancel_matching(user_data["id"])
    return None


@router.post("/sessions", response_model=TutoringSessionResponse, status_code=201)
async def start_session(
    body: SessionStart,
    user_data: Dict = Depends(require_permission("tutoring:deliver")),
    service: TimebankService = Depends(get_timebank_service)
):
    return service.start_session(user_data["id"], body.subject, body.student_name)


@router.get("/sessions/active", response_model=Optional[TutoringSessionResponse])
async def get_active_session(
    user_data: Dict = Depends(get_current_user_id),
    service: TimebankService = Depends(get_timebank_service)
):
    return service.get_active_session(user_data["id"])


@router.post("/sessions/end", response_model=TutoringSessionResponse)
async def end_session(
    body: SessionEnd,
    user_data: Dict = Depends(require_permission("tutoring:deliver")),
    service: TimebankService = Depends(get_timebank_service)
):
    """Finish with a 1-5 rating; credits are paid for the minutes spent"""
    return service.end_session(user_data["id"], body)


@router.post("/sessions/cancel", response_model=TutoringSessionResponse)
async def cancel_session(
    user_data: Dict = Depends(require_permission("tutoring:deliver")),
    service: TimebankService = Depends(get_timebank_service)
):
    return service.cancel_session(user_data["id"])


@router.get("/sessions/history", response_model=List[TutoringSessionResponse])
async def session_history(
    limit: int = Query(20, ge=1, le=100),
    user_data: Dict = Depends(get_current_user_id),
    service: TimebankService = Depends(get_timebank_service)
):
    return service.session_history(user_data["id"], limit)


# ===== Skills and goals =====

@router.get("/profile", response_model=TimebankProfile)
async def get_profile(
    user_data: Dict = Depends(get_current_user_id),
    service: TimebankService = Depends(get_timebank_service)
):
    return service.get_profile(user_data["id"])


@router.put("/skills", response_model=TimebankProfile)
async def update_skills(
    body: SkillsUpdate,
    user_data: Dict = Depends(require_permission("tutoring:deliver")),
    service: TimebankService = Depends(get_timebank_service)
):
    return service.update_skills(user_data["id"], body.skills)


@router.put("/goals", response_model=TimebankProfile)
async def update_goals(
    body: GoalsUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: TimebankService = Depends(get_timebank_service)
):
    return service.update_goals(user_data["id"], body.goals)
