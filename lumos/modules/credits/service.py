import math
import random
import string
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException
from supabase import Client

from lumos.config import settings
from lumos.modules.credits.schemas import (
    WalletResponse, TopupQuoteRequest, TopupQuote, TopupResponse, HoldEstimate
)
from lumos.modules.profiles.service import is_unique_violation

logger = logging.getLogger(__name__)

RM_PER_CREDIT = 1
MIN_TOPUP = 10
MAX_TOPUP = 500

# (minimum credits, bonus)
BONUS_TIERS = [(200, 40), (100, 15), (50, 5)]

PROMOS = {
    "LUMOS10": {"bonus_pct": 10, "note": "+10% bonus credits"},
    "STUDENT5": {"extra_credits": 5, "note": "+5 credits"},
}

PAYMENT_METHODS = {
    "card": "Debit/Credit Card (Visa/Mastercard)",
    "fpx": "FPX Online Banking (Malaysia)",
    "tng": "Touch 'n Go eWallet",
    "grabpay": "GrabPay",
}

CREDIT_MIN_HOLD = 3
MINUTES_PER_CREDIT = 2

GOAL_BASE = {
    "solve": 4,
    "homework": 6,
    "testprep": 6,
    "check": 3,
    "deepen": 5,
    "explore": 3,
    "other": 3,
}

LEVEL_ADD = {
    "none": 4,
    "little": 2,
    "medium": 1,
    "well": 0,
    "perfect": 0,
}


def tier_bonus(credits: int) -> int:
    for minimum, bonus in BONUS_TIERS:
        if credits >= minimum:
            return bonus
    return 0


def normalize_promo(code: Optional[str]) -> Optional[str]:
    """Upper-cased known code, None when blank; unknown codes are a 400"""
    if not code or not code.strip():
        return None
    code = code.strip().upper()
    if code not in PROMOS:
        raise HTTPException(status_code=400, detail="Invalid promo code")
    return code


def promo_bonus(base_credits: int, code: Optional[str]) -> int:
    if not code:
        return 0
    promo = PROMOS[code]
    return math.floor(base_credits * promo.get("bonus_pct", 0) / 100) + promo.get("extra_credits", 0)


def quote_topup(request: TopupQuoteRequest) -> TopupQuote:
    """Price a top-up. Only base credits are paid for; bonuses are free."""
    base = max(MIN_TOPUP, min(MAX_TOPUP, round(request.credits)))
    code = normalize_promo(request.promo_code)
    tier = tier_bonus(base)
    promo = promo_bonus(base, code)
    return TopupQuote(
        base_credits=base,
        tier_bonus=tier,
        promo_bonus=promo,
        final_credits=base + tier + promo,
        total_rm=float(base * RM_PER_CREDIT),
        promo_code=code,
        method=request.method,
    )


def estimate_hold_credits(goal: str, level: str) -> int:
    return max(CREDIT_MIN_HOLD, GOAL_BASE[goal] + LEVEL_ADD[level])


def estimate_hold(goal: str, level: str) -> HoldEstimate:
    credits = estimate_hold_credits(goal, level)
    return HoldEstimate(credits=credits, minutes=credits * MINUTES_PER_CREDIT)


def new_txn_id() -> str:
    return "TXN-" + "".join(random.choices(string.ascii_uppercase + string.digits, k=8))


class CreditService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_wallet(self, user_id: str) -> WalletResponse:
        """Wallet for the user; created with the starting balance on first read"""
        try:
            result = self.supabase.table("credit_wallets")\
                .select("*")\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
            if result.data:
                return WalletResponse(**result.data[0])
            try:
                created = self.supabase.table("credit_wallets").insert({
                    "user_id": user_id,
                    "balance": settings.starting_credits,
                    "updated_at": datetime.utcnow().isoformat()
                }).execute()
            except Exception as e:
                if not is_unique_violation(e):
                    raise
                # created concurrently
                return self.get_wallet(user_id)
            logger.info(f"Created wallet for user {user_id} with {settings.starting_credits} credits")
            return WalletResponse(**created.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_balance(self, user_id: str) -> int:
        return self.get_wallet(user_id).balance

    def set_balance(self, user_id: str, balance: int) -> WalletResponse:
        if balance < 0:
            raise HTTPException(status_code=400, detail="Balance cannot be negative")
        self.get_wallet(user_id)
        try:
            result = self.supabase.table("credit_wallets")\
                .update({"balance": balance, "updated_at": datetime.utcnow().isoformat()})\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to update wallet")
            return WalletResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_credits(self, user_id: str, amount: int) -> WalletResponse:
        if amount <= 0:
            raise HTTPException(status_code=400, detail="Amount must be positive")
        return self.set_balance(user_id, self.get_balance(user_id) + amount)

    def deduct_credits(self, user_id: str, amount: int) -> WalletResponse:
        """Take credits away; the balance stops at zero"""
        if amount <= 0:
            raise HTTPException(status_code=400, detail="Amount must be positive")
        return self.set_balance(user_id, max(0, self.get_balance(user_id) - amount))

    def topup(self, user_id: str, request: TopupQuoteRequest) -> TopupResponse:
        """Record a (simulated) payment and credit the wallet"""
        quote = quote_topup(request)
        bonus = quote.tier_bonus + quote.promo_bonus
        try:
            result = self.supabase.table("credit_topups").insert({
                "user_id": user_id,
                "txn_id": new_txn_id(),
                "method": quote.method,
                "base_credits": quote.base_credits,
                "bonus_credits": bonus,
                "credits": quote.final_credits,
                "amount_rm": quote.total_rm,
                "promo_code": quote.promo_code,
                "created_at": datetime.utcnow().isoformat()
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to record top-up")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        wallet = self.add_credits(user_id, quote.final_credits)
        logger.info(f"User {user_id} topped up {quote.final_credits} credits via {quote.method}")
        return TopupResponse(**result.data[0], balance=wallet.balance)

    def list_topups(self, user_id: str, limit: int = 20) -> List[TopupResponse]:
        """Top-up history, newest first"""
        try:
            result = self.supabase.table("credit_topups")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .execute()
            return [TopupResponse(**t) for t in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
