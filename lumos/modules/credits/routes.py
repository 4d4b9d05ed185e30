from fastapi import APIRouter, Depends, Query
from lumos.database.supabase_client import get_supabase
from lumos.modules.credits.schemas import (
    WalletResponse, SpendRequest, TopupQuoteRequest, TopupQuote, TopupResponse,
    HoldEstimateRequest, HoldEstimate
)
from lumos.modules.credits.service import CreditService, quote_topup, estimate_hold, PAYMENT_METHODS
from lumos.core.dependencies import get_current_user_id, require_permission
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/credits", tags=["credits"])


def get_credit_service(supabase: Client = Depends(get_supabase)) -> CreditService:
    return CreditService(supabase)


@router.get("/wallet", response_model=WalletResponse)
async def get_wallet(
    user_data: Dict = Depends(require_permission("credits:read")),
    service: CreditService = Depends(get_credit_service)
):
    """Current balance; a new wallet starts with 25 credits"""
    return service.get_wallet(user_data["id"])


@router.post("/spend", response_model=WalletResponse)
async def spend_credits(
    body: SpendRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: CreditService = Depends(get_credit_service)
):
    return service.deduct_credits(user_data["id"], body.amount)


@router.get("/methods")
async def payment_methods():
    return [{"id": method_id, "label": label} for method_id, label in PAYMENT_METHODS.items()]


@router.post("/quote", response_model=TopupQuote)
async def quote(body: TopupQuoteRequest):
    """Price a top-up without charging anything"""
    return quote_topup(body)


@router.post("/topup", response_model=TopupResponse, status_code=201)
async def topup(
    body: TopupQuoteRequest,
    user_data: Dict = Depends(require_permission("credits:topup")),
    service: CreditService = Depends(get_credit_service)
):
    return service.topup(user_data["id"], body)


@router.get("/topups", response_model=List[TopupResponse])
async def list_topups(
    limit: int = Query(20, ge=1, le=100),
    user_data: Dict = Depends(require_permission("credits:read")),
    service: CreditService = Depends(get_credit_service)
):
    return service.list_topups(user_data["id"], limit)


@router.post("/hold-estimate", response_model=HoldEstimate)
async def hold_estimate(body: HoldEstimateRequest):
    """Credits held (and minutes of tutoring) for a help request"""
    return estimate_hold(body.goal, body.level)
