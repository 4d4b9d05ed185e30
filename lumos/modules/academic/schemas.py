from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Literal
from datetime import datetime, date

Priority = Literal["low", "medium", "high"]
ProjectStatus = Literal["not_started", "in_progress", "completed"]
Credibility = Literal["high", "medium", "low"]
UseCase = Literal["vendor_announcement", "technical_doc", "academic_evidence", "news_reporting", "general_info"]
SourceCategory = Literal["academic", "news", "blog", "government", "commercial", "unknown"]


class ProjectCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    due_date: Optional[date] = None
    priority: Priority = "medium"
    status: ProjectStatus = "not_started"
    subject: Optional[str] = None
    estimated_hours: Optional[float] = Field(None, ge=0)


class ProjectUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[date] = None
    priority: Optional[Priority] = None
    status: Optional[ProjectStatus] = None
    subject: Optional[str] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    actual_hours: Optional[float] = Field(None, ge=0)


class ProjectResponse(BaseModel):
    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    due_date: Optional[date] = None
    priority: Priority = "medium"
    status: ProjectStatus = "not_started"
    subject: Optional[str] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StudyPlanCreate(BaseModel):
    project_id: Optional[str] = None
    planned_date: date
    start_time: Optional[str] = None
    duration_minutes: int = Field(..., gt=0)
    task_description: str = Field(..., min_length=1)


class StudyPlanUpdate(BaseModel):
    planned_date: Optional[date] = None
    start_time: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, gt=0)
    task_description: Optional[str] = None
    completed: Optional[bool] = None
    actual_duration: Optional[int] = Field(None, ge=0)
    productivity_score: Optional[int] = Field(None, ge=1, le=10)
    notes: Optional[str] = None


class StudyPlanResponse(BaseModel):
    id: str
    user_id: str
    project_id: Optional[str] = None
    planned_date: date
    start_time: Optional[str] = None
    duration_minutes: int
    task_description: str
    completed: bool = False
    actual_duration: Optional[int] = None
    productivity_score: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AcademicContext(BaseModel):
    projects: List[ProjectResponse] = []
    upcoming_plans: List[StudyPlanResponse] = []


class CredibilityBreakdown(BaseModel):
    officialness: float = 0.6
    evidence_rigor: float = 0.4
    independence: float = 0.4
    verifiability: float = 0.5


class ResourceAnalysis(BaseModel):
    credibility: Credibility = "medium"
    reasoning: str = "Analysis completed."
    key_points: List[str] = []
    potential_issues: List[str] = []
    suggestions: List[str] = []
    confidence: float = 0.6
    breakdown: CredibilityBreakdown = CredibilityBreakdown()
    credibility_by_use: Optional[Dict[str, Credibility]] = None


class AnalyzeResourceRequest(BaseModel):
    content: str = Field(..., min_length=1)
    context: Optional[str] = None
    source_url: Optional[str] = None
    use_case: UseCase = "general_info"


class UrlCheckRequest(BaseModel):
    url: str = Field(..., min_length=1)
    analyze_content: bool = False


class UrlCheck(BaseModel):
    score: int
    category: SourceCategory
    reasoning: str


class SuggestedResource(BaseModel):
    title: str
    url: Optional[str] = None
    type: Literal["video", "article", "book", "course"] = "article"
    difficulty: Literal["beginner", "intermediate", "advanced"] = "intermediate"


class LearningAnalysis(BaseModel):
    knowledge_gaps: List[str] = []
    suggested_resources: List[SuggestedResource] = []
    study_plan_suggestions: List[str] = []
    estimated_time: str = "1-2 hours per day"


class AnalyzeLearningRequest(BaseModel):
    conversation_history: List[str]
    current_project: Optional[str] = None
    user_level: Optional[str] = None


class StudyTask(BaseModel):
    date: str
    task: str
    duration: int
    priority: Priority


class GeneratedStudyPlan(BaseModel):
    daily_tasks: List[StudyTask] = []
    milestones: List[str] = []
    tips: List[str] = []


class GenerateStudyPlanRequest(BaseModel):
    project_title: str = Field(..., min_length=1)
    due_date: date
    estimated_hours: float = Field(10, gt=0)
    current_knowledge: Optional[List[str]] = None
