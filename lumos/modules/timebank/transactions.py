from supabase import Client
from lumos.modules.credits.service import CreditService
from lumos.modules.timebank.notifications import NotificationService
from lumos.modules.timebank.schemas import TransactionCreate, TransactionResponse
from typing import List
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class TransactionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.credits = CreditService(supabase)
        self.notifications = NotificationService(supabase)

    def add_transaction(self, user_id: str, transaction: TransactionCreate) -> TransactionResponse:
        """Record a timebank transaction, apply it to the wallet and notify the user.

        Earned amounts are stored positive and spent amounts negative whatever
        sign the caller used.
        """
        amount = abs(transaction.amount) if transaction.type == "earned" else -abs(transaction.amount)
        try:
            result = self.supabase.table("timebank_transactions").insert({
                "user_id": user_id,
                "type": transaction.type,
                "amount": amount,
                "activity": transaction.activity,
                "counterpart": transaction.counterpart,
                "rating": transaction.rating,
                "description": transaction.description,
                "created_at": datetime.utcnow().isoformat()
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to record transaction")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if amount > 0:
            self.credits.add_credits(user_id, amount)
        elif amount < 0:
            self.credits.deduct_credits(user_id, -amount)

        earned = transaction.type == "earned"
        self.notifications.notify(
            user_id,
            "success" if earned else "info",
            "Credits Earned!" if earned else "Credits Spent",
            f"{'+' if earned else ''}{amount} credits for {transaction.activity}",
        )
        logger.info(f"Timebank {transaction.type} {amount} for user {user_id}: {transaction.activity}")
        return TransactionResponse(**result.data[0])

    def list_transactions(self, user_id: str, limit: int = 20) -> List[TransactionResponse]:
        """Newest first"""
        try:
            result = self.supabase.table("timebank_transactions")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .execute()
            return [TransactionResponse(**t) for t in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
