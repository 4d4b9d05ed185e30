from supabase import Client
from lumos.modules.credits.service import CreditService, estimate_hold
from lumos.modules.timebank.notifications import NotificationService
from lumos.modules.timebank.transactions import TransactionService
from lumos.modules.timebank.schemas import HelpRequestCreate, HelpRequestResponse, TransactionCreate
from typing import List, Optional
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class HelpRequestService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.credits = CreditService(supabase)
        self.transactions = TransactionService(supabase)
        self.notifications = NotificationService(supabase)

    def create(self, student_id: str, request: HelpRequestCreate) -> HelpRequestResponse:
        """Hold credits for the estimated tutoring time and queue the request for matching"""
        hold = estimate_hold(request.goal, request.level)
        balance = self.credits.get_balance(student_id)
        if balance < hold.credits:
            raise HTTPException(
                status_code=402,
                detail=f"You need {hold.credits} credits but only have {balance}. Please top up your credits first."
            )
        try:
            result = self.supabase.table("help_requests").insert({
                "student_id": student_id,
                "service": request.service,
                "subject": request.subject,
                "goal": request.goal,
                "level": request.level,
                "mood": request.mood,
                "hold_credits": hold.credits,
                "minutes": hold.minutes,
                "auto_extend": request.auto_extend,
                "status": "matching",
                "created_at": datetime.utcnow().isoformat()
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create help request")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        self.transactions.add_transaction(student_id, TransactionCreate(
            type="spent",
            amount=hold.credits,
            activity=f"Help with {request.subject}",
            description=f"Hold for about {hold.minutes} minutes of tutoring",
        ))
        return HelpRequestResponse(**result.data[0])

    def get(self, request_id: str) -> HelpRequestResponse:
        try:
            result = self.supabase.table("help_requests")\
                .select("*")\
                .eq("id", request_id)\
                .limit(1)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Help request not found")
            return HelpRequestResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_for_student(self, student_id: str, limit: int = 20) -> List[HelpRequestResponse]:
        try:
            result = self.supabase.table("help_requests")\
                .select("*")\
                .eq("student_id", student_id)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .execute()
            return [HelpRequestResponse(**r) for r in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def waiting(self, limit: int = 50, offset: int = 0) -> List[HelpRequestResponse]:
        """Requests still looking for a tutor, oldest first"""
        try:
            result = self.supabase.table("help_requests")\
                .select("*")\
                .eq("status", "matching")\
                .order("created_at")\
                .range(offset, offset + limit - 1)\
                .execute()
            return [HelpRequestResponse(**r) for r in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def claim(self, request_id: str, volunteer_id: str) -> Optional[HelpRequestResponse]:
        """Move a request from matching to matched; None when someone else got there first"""
        try:
            result = self.supabase.table("help_requests")\
                .update({
                    "status": "matched",
                    "volunteer_id": volunteer_id,
                    "matched_at": datetime.utcnow().isoformat()
                })\
                .eq("id", request_id)\
                .eq("status", "matching")\
                .execute()
            return HelpRequestResponse(**result.data[0]) if result.data else None
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def set_status(self, request_id: str, status: str):
        try:
            self.supabase.table("help_requests")\
                .update({"status": status})\
                .eq("id", request_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def cancel(self, request_id: str, student_id: str) -> HelpRequestResponse:
        """Student withdraws a request that has not been matched; the hold is refunded"""
        request = self.get(request_id)
        if request.student_id != student_id:
            raise HTTPException(status_code=404, detail="Help request not found")
        if request.status != "matching":
            raise HTTPException(status_code=409, detail=f"Help request is already {request.status}")
        try:
            result = self.supabase.table("help_requests")\
                .update({"status": "cancelled"})\
                .eq("id", request_id)\
                .eq("status", "matching")\
                .execute()
            if not result.data:
                raise HTTPException(status_code=409, detail="Help request was matched before it could be cancelled")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        self._refund(request, "Hold Refunded", f"{request.hold_credits} credits returned to your wallet")
        return HelpRequestResponse(**result.data[0])

    def release(self, request_id: str) -> Optional[HelpRequestResponse]:
        """Tutor dropped the session: cancel the matched request and refund the hold"""
        try:
            result = self.supabase.table("help_requests")\
                .update({"status": "cancelled"})\
                .eq("id", request_id)\
                .eq("status", "matched")\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            return None
        request = HelpRequestResponse(**result.data[0])
        self._refund(
            request, "Session Cancelled",
            f"Your tutor could not continue. {request.hold_credits} credits returned to your wallet"
        )
        return request

    def _refund(self, request: HelpRequestResponse, title: str, message: str):
        self.credits.add_credits(request.student_id, request.hold_credits)
        self.notifications.notify(request.student_id, "info", title, message)
        logger.info(f"Refunded {request.hold_credits} credits to {request.student_id} for request {request.id}")
