import math
import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import HTTPException
from supabase import Client

from lumos.modules.credits.service import CreditService
from lumos.modules.profiles.service import ProfileService
from lumos.modules.timebank.help_requests import HelpRequestService
from lumos.modules.timebank.notifications import NotificationService
from lumos.modules.timebank.transactions import TransactionService
from lumos.modules.timebank.schemas import (
    TransactionCreate, TutoringSessionResponse, SessionEnd, MatchResult,
    TimebankProfile, TimebankSummary, HelpRequestResponse
)

logger = logging.getLogger(__name__)

CREDITS_PER_MINUTE = 0.8
MATCH_PAGE_SIZE = 50


def credits_for_minutes(minutes: int) -> int:
    """About 0.8 credits a minute, at least one; halves round up"""
    return max(1, math.floor(minutes * CREDITS_PER_MINUTE + 0.5))


def minutes_between(started_at: datetime, ended_at: datetime) -> int:
    if started_at.tzinfo is None:
        started_at = started_at.replace(tzinfo=timezone.utc)
    return max(0, math.floor((ended_at - started_at).total_seconds() / 60 + 0.5))


def skill_matches(subject: str, skills: List[str]) -> bool:
    if not skills:
        return True
    subject = subject.strip().lower()
    return any(skill.strip().lower() == subject for skill in skills)


class TimebankService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.credits = CreditService(supabase)
        self.notifications = NotificationService(supabase)
        self.transactions = TransactionService(supabase)
        self.help_requests = HelpRequestService(supabase)

    # ===== Tutoring sessions =====

    def get_active_session(self, volunteer_id: str) -> Optional[TutoringSessionResponse]:
        try:
            result = self.supabase.table("tutoring_sessions")\
                .select("*")\
                .eq("volunteer_id", volunteer_id)\
                .eq("status", "active")\
                .limit(1)\
                .execute()
            return TutoringSessionResponse(**result.data[0]) if result.data else None
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def start_session(
        self,
        volunteer_id: str,
        subject: str,
        student_name: str,
        student_id: Optional[str] = None,
        help_request_id: Optional[str] = None,
    ) -> TutoringSessionResponse:
        """Open a tutoring session; a volunteer runs one at a time"""
        if self.get_active_session(volunteer_id):
            raise HTTPException(status_code=409, detail="You already have an active tutoring session")
        try:
            result = self.supabase.table("tutoring_sessions").insert({
                "volunteer_id": volunteer_id,
                "student_id": student_id,
                "help_request_id": help_request_id,
                "subject": subject,
                "student_name": student_name,
                "status": "active",
                "duration_minutes": 0,
                "started_at": datetime.utcnow().isoformat()
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to start session")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        self.notifications.notify(
            volunteer_id, "info", "Session Started",
            f"You're now tutoring {student_name} in {subject}"
        )
        return TutoringSessionResponse(**result.data[0])

    def end_session(self, volunteer_id: str, end: SessionEnd) -> TutoringSessionResponse:
        """Complete the active session and pay the volunteer for the time spent"""
        session = self.get_active_session(volunteer_id)
        if not session:
            raise HTTPException(status_code=404, detail="No active tutoring session")
        ended_at = datetime.now(timezone.utc)
        duration = minutes_between(session.started_at, ended_at)
        credits_earned = credits_for_minutes(duration)
        try:
            result = self.supabase.table("tutoring_sessions")\
                .update({
                    "status": "completed",
                    "ended_at": ended_at.isoformat(),
                    "duration_minutes": duration,
                    "rating": end.rating,
                    "feedback": end.feedback,
                    "credits_earned": credits_earned
                })\
                .eq("id", session.id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to end session")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        if session.help_request_id:
            self.help_requests.set_status(session.help_request_id, "completed")
        self.transactions.add_transaction(volunteer_id, TransactionCreate(
            type="earned",
            amount=credits_earned,
            activity=f"Tutored {session.subject}",
            counterpart=session.student_name,
            rating=end.rating,
            description=end.feedback,
        ))
        logger.info(f"Volunteer {volunteer_id} finished a {duration} min session, earned {credits_earned}")
        return TutoringSessionResponse(**result.data[0])

    def cancel_session(self, volunteer_id: str) -> TutoringSessionResponse:
        """Drop the active session; a matched student gets their hold back"""
        session = self.get_active_session(volunteer_id)
        if not session:
            raise HTTPException(status_code=404, detail="No active tutoring session")
        try:
            result = self.supabase.table("tutoring_sessions")\
                .update({"status": "cancelled", "ended_at": datetime.utcnow().isoformat()})\
                .eq("id", session.id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to cancel session")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if session.help_request_id:
            self.help_requests.release(session.help_request_id)
        return TutoringSessionResponse(**result.data[0])

    def session_history(self, volunteer_id: str, limit: int = 20) -> List[TutoringSessionResponse]:
        """Finished sessions, newest first"""
        try:
            result = self.supabase.table("tutoring_sessions")\
                .select("*")\
                .eq("volunteer_id", volunteer_id)\
                .neq("status", "active")\
                .order("started_at", desc=True)\
                .limit(limit)\
                .execute()
            return [TutoringSessionResponse(**s) for s in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # ===== Matching =====

    def match(self, volunteer_id: str, activity: str = "tutoring") -> MatchResult:
        """Claim the oldest waiting request the volunteer can tutor and start a session for it"""
        if self.get_active_session(volunteer_id):
            raise HTTPException(status_code=409, detail="You already have an active tutoring session")
        skills = self.get_profile(volunteer_id).tutor_skills
        offset = 0
        while True:
            page = self.help_requests.waiting(limit=MATCH_PAGE_SIZE, offset=offset)
            lost = 0
            for request in page:
                if request.student_id == volunteer_id or not skill_matches(request.subject, skills):
                    continue
                claimed = self.help_requests.claim(request.id, volunteer_id)
                if claimed is None:
                    # left the queue, so later rows shift up by one
                    lost += 1
                    continue
                return self._start_matched_session(volunteer_id, claimed)
            if len(page) < MATCH_PAGE_SIZE:
                break
            offset += len(page) - lost

        self.notifications.notify(
            volunteer_id, "info", "No students waiting",
            f"Nobody needs help with {activity} right now. Try again soon."
        )
        return MatchResult(matched=False)

    def _start_matched_session(self, volunteer_id: str, request: HelpRequestResponse) -> MatchResult:
        profiles = ProfileService(self.supabase)
        student_name = profiles.get_display_name(request.student_id) or "Student"
        session = self.start_session(
            volunteer_id, request.subject, student_name,
            student_id=request.student_id, help_request_id=request.id
        )
        volunteer_name = profiles.get_display_name(volunteer_id) or "A volunteer"
        self.notifications.notify(
            request.student_id, "success", "Tutor Found",
            f"{volunteer_name} will help you with {request.subject}"
        )
        return MatchResult(matched=True, session=session, help_request=request)

    def cancel_matching(self, volunteer_id: str):
        self.notifications.notify(
            volunteer_id, "info", "Matching Cancelled",
            "You stopped looking for students to help"
        )

    # ===== Skills and goals =====

    def get_profile(self, user_id: str) -> TimebankProfile:
        try:
            result = self.supabase.table("timebank_profiles")\
                .select("*")\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
            row = result.data[0] if result.data else {}
            return TimebankProfile(
                user_id=user_id,
                tutor_skills=row.get("tutor_skills") or [],
                learning_goals=row.get("learning_goals") or [],
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _save_profile(self, user_id: str, values: dict) -> TimebankProfile:
        try:
            self.supabase.table("timebank_profiles").upsert(
                {"user_id": user_id, **values, "updated_at": datetime.utcnow().isoformat()},
                on_conflict="user_id"
            ).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return self.get_profile(user_id)

    def update_skills(self, user_id: str, skills: List[str]) -> TimebankProfile:
        profile = self._save_profile(user_id, {"tutor_skills": skills})
        self.notifications.notify(
            user_id, "success", "Skills Updated",
            f"You can now tutor in {len(skills)} subjects"
        )
        return profile

    def update_goals(self, user_id: str, goals: List[str]) -> TimebankProfile:
        profile = self._save_profile(user_id, {"learning_goals": goals})
        self.notifications.notify(
            user_id, "success", "Learning Goals Updated",
            f"Added {len(goals)} subjects to your learning goals"
        )
        return profile

    def summary(self, user_id: str) -> TimebankSummary:
        """Dashboard view: balance, latest activity and unread count"""
        profile = self.get_profile(user_id)
        return TimebankSummary(
            balance=self.credits.get_balance(user_id),
            recent_transactions=self.transactions.list_transactions(user_id, limit=5),
            active_session=self.get_active_session(user_id),
            unread_notifications=self.notifications.unread_count(user_id),
            tutor_skills=profile.tutor_skills,
            learning_goals=profile.learning_goals,
        )
