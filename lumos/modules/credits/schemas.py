from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime

PaymentMethod = Literal["card", "fpx", "tng", "grabpay"]
HelpGoal = Literal["solve", "homework", "testprep", "check", "deepen", "explore", "other"]
UnderstandingLevel = Literal["none", "little", "medium", "well", "perfect"]


class WalletResponse(BaseModel):
    user_id: str
    balance: int
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SpendRequest(BaseModel):
    amount: int = Field(..., gt=0)
    reason: Optional[str] = None


class TopupQuoteRequest(BaseModel):
    credits: int
    promo_code: Optional[str] = None
    method: PaymentMethod = "fpx"


class TopupQuote(BaseModel):
    base_credits: int
    tier_bonus: int
    promo_bonus: int
    final_credits: int
    total_rm: float
    promo_code: Optional[str] = None
    method: PaymentMethod


class TopupResponse(BaseModel):
    id: str
    txn_id: str
    method: PaymentMethod
    base_credits: int
    bonus_credits: int
    credits: int
    amount_rm: float
    promo_code: Optional[str] = None
    created_at: datetime
    balance: Optional[int] = None

    class Config:
        from_attributes = True


class HoldEstimateRequest(BaseModel):
    goal: HelpGoal
    level: UnderstandingLevel


class HoldEstimate(BaseModel):
    credits: int
    minutes: int
