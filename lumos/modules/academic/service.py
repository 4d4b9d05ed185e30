from supabase import Client
from lumos.modules.academic.schemas import (
    ProjectCreate, ProjectUpdate, ProjectResponse,
    StudyPlanCreate, StudyPlanUpdate, StudyPlanResponse, AcademicContext
)
from typing import List, Optional
from fastapi import HTTPException
from datetime import datetime, date, timedelta
import logging

logger = logging.getLogger(__name__)


class AcademicService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_project(self, user_id: str, project_data: ProjectCreate) -> ProjectResponse:
        """Create a new academic project"""
        try:
            row = project_data.model_dump(mode="json")
            row.update({
                "user_id": user_id,
                "actual_hours": 0,
                "created_at": datetime.utcnow().isoformat()
            })
            result = self.supabase.table("academic_projects").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create project")
            logger.info(f"Created project '{project_data.title}' for user {user_id}")
            return ProjectResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_projects(self, user_id: str, status: Optional[str] = None) -> List[ProjectResponse]:
        """List the user's projects, soonest deadline first"""
        try:
            query = self.supabase.table("academic_projects")\
                .select("*")\
                .eq("user_id", user_id)
            if status:
                query = query.eq("status", status)
            result = query.order("due_date").execute()
            return [ProjectResponse(**p) for p in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_project(self, project_id: str, user_id: str, project_data: ProjectUpdate) -> ProjectResponse:
        """Update a project owned by the user"""
        try:
            update_data = project_data.model_dump(mode="json", exclude_none=True)
            update_data["updated_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("academic_projects")\
                .update(update_data)\
                .eq("id", project_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Project not found")
            return ProjectResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_project(self, project_id: str, user_id: str):
        try:
            result = self.supabase.table("academic_projects")\
                .delete()\
                .eq("id", project_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Project not found")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_study_plan(self, user_id: str, plan_data: StudyPlanCreate) -> StudyPlanResponse:
        """Schedule a study session"""
        try:
            row = plan_data.model_dump(mode="json")
            row.update({
                "user_id": user_id,
                "completed": False,
                "created_at": datetime.utcnow().isoformat()
            })
            result = self.supabase.table("study_plans").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create study plan")
            return StudyPlanResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def upcoming_study_plans(self, user_id: str, days: int = 7, today: Optional[date] = None) -> List[StudyPlanResponse]:
        """Study sessions planned between today and today + days"""
        today = today or date.today()
        try:
            result = self.supabase.table("study_plans")\
                .select("*")\
                .eq("user_id", user_id)\
                .gte("planned_date", today.isoformat())\
                .lte("planned_date", (today + timedelta(days=days)).isoformat())\
                .order("planned_date")\
                .execute()
            return [StudyPlanResponse(**p) for p in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_study_plan(self, plan_id: str, user_id: str, plan_data: StudyPlanUpdate) -> StudyPlanResponse:
        """Mark a session complete, reschedule it or add notes"""
        try:
            update_data = plan_data.model_dump(mode="json", exclude_none=True)
            update_data["updated_at"] = datetime.utcnow().isoformat()
            result = self.supabase.table("study_plans")\
                .update(update_data)\
                .eq("id", plan_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Study plan not found")
            return StudyPlanResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_context(self, user_id: str) -> AcademicContext:
        """Projects plus the coming week's study sessions, as handed to the tutor"""
        return AcademicContext(
            projects=self.list_projects(user_id),
            upcoming_plans=self.upcoming_study_plans(user_id),
        )
