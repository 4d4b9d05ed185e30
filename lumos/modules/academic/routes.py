from fastapi import APIRouter, Depends
from lumos.database.supabase_client import get_supabase
from lumos.modules.academic.schemas import (
    ProjectCreate, ProjectUpdate, ProjectResponse, ProjectStatus,
    StudyPlanCreate, StudyPlanUpdate, StudyPlanResponse, AcademicContext,
    AnalyzeResourceRequest, ResourceAnalysis, UrlCheckRequest, UrlCheck,
    AnalyzeLearningRequest, LearningAnalysis, GenerateStudyPlanRequest, GeneratedStudyPlan
)
from lumos.modules.academic.service import AcademicService
from lumos.modules.academic.ai_service import AcademicAIService
from lumos.modules.llm.openrouter_client import OpenRouterClient
from lumos.modules.llm.routes import get_openrouter_client
from lumos.core.dependencies import get_current_user_id, require_permission
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/academic", tags=["academic"])


def get_academic_service(supabase: Client = Depends(get_supabase)) -> AcademicService:
    return AcademicService(supabase)


def get_academic_ai_service(client: OpenRouterClient = Depends(get_openrouter_client)) -> AcademicAIService:
    return AcademicAIService(client)


# ===== Projects =====

@router.post("/projects", response_model=ProjectResponse, status_code=201)
async def create_project(
    project_data: ProjectCreate,
    user_data: Dict = Depends(require_permission("academic:write")),
    service: AcademicService = Depends(get_academic_service)
):
    """Create a new academic project"""
    return service.create_project(user_data["id"], project_data)


@router.get("/projects", response_model=List[ProjectResponse])
async def list_projects(
    status: Optional[ProjectStatus] = None,
    user_data: Dict = Depends(get_current_user_id),
    service: AcademicService = Depends(get_academic_service)
):
    """List projects, optionally by status"""
    return service.list_projects(user_data["id"], status)


@router.put("/projects/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    user_data: Dict = Depends(require_permission("academic:write")),
    service: AcademicService = Depends(get_academic_service)
):
    return service.update_project(project_id, user_data["id"], project_data)


@router.delete("/projects/{project_id}", status_code=204)
async def delete_project(
    project_id: str,
    user_data: Dict = Depends(require_permission("academic:write")),
    service: AcademicService = Depends(get_academic_service)
):
    service.delete_project(project_id, user_data["id"])
    return None


# ===== Study plans =====

@router.post("/study-plans", response_model=StudyPlanResponse, status_code=201)
async def create_study_plan(
    plan_data: StudyPlanCreate,
    user_data: Dict = Depends(require_permission("academic:write")),
    service: AcademicService = Depends(get_academic_service)
):
    """Schedule a study session"""
    return service.create_study_plan(user_data["id"], plan_data)


@router.get("/study-plans", response_model=List[StudyPlanResponse])
async def upcoming_study_plans(
    days: int = 7,
    user_data: Dict = Depends(get_current_user_id),
    service: AcademicService = Depends(get_academic_service)
):
    """Study sessions in the next `days` days"""
    return service.upcoming_study_plans(user_data["id"], days if days > 0 else 7)


@router.put("/study-plans/{plan_id}", response_model=StudyPlanResponse)
async def update_study_plan(
    plan_id: str,
    plan_data: StudyPlanUpdate,
    user_data: Dict = Depends(require_permission("academic:write")),
    service: AcademicService = Depends(get_academic_service)
):
    """Mark complete, reschedule or add notes"""
    return service.update_study_plan(plan_id, user_data["id"], plan_data)


@router.get("/context", response_model=AcademicContext)
async def get_academic_context(
    user_data: Dict = Depends(get_current_user_id),
    service: AcademicService = Depends(get_academic_service)
):
    """Projects and upcoming study sessions, as the tutor sees them"""
    return service.get_context(user_data["id"])


# ===== AI analysis (nothing stored) =====

@router.post("/analyze-resource", response_model=ResourceAnalysis)
async def analyze_resource(
    body: AnalyzeResourceRequest,
    user_data: Dict = Depends(get_current_user_id),
    ai_service: AcademicAIService = Depends(get_academic_ai_service)
):
    """Credibility and usefulness of a resource for the intended use"""
    return await ai_service.analyze_resource(body.content, body.context, body.source_url, body.use_case)


@router.post("/quick-check-url", response_model=UrlCheck)
async def quick_check_url(
    body: UrlCheckRequest,
    user_data: Dict = Depends(get_current_user_id),
    ai_service: AcademicAIService = Depends(get_academic_ai_service)
):
    return await ai_service.quick_credibility_check(body.url, body.analyze_content)


@router.post("/analyze-learning", response_model=LearningAnalysis)
async def analyze_learning(
    body: AnalyzeLearningRequest,
    user_data: Dict = Depends(get_current_user_id),
    ai_service: AcademicAIService = Depends(get_academic_ai_service)
):
    """Knowledge gaps and suggested resources from a conversation"""
    return await ai_service.analyze_learning_needs(body.conversation_history, body.current_project, body.user_level)


@router.post("/generate-study-plan", response_model=GeneratedStudyPlan)
async def generate_study_plan(
    body: GenerateStudyPlanRequest,
    user_data: Dict = Depends(get_current_user_id),
    ai_service: AcademicAIService = Depends(get_academic_ai_service)
):
    """Day-by-day plan up to the due date"""
    return await ai_service.generate_study_plan(
        body.project_title, body.due_date, body.estimated_hours, body.current_knowledge
    )
