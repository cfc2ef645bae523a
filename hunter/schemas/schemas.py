"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Fields are snake_case in Python and camelCase on the wire, which is what
the front-end sends and reads. Requests accept either spelling.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError
from typing import Optional, List, Literal
from datetime import datetime
from enum import Enum

from hunter.core.validation import check_email, check_password


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _enum_check(enum_cls, value, error_type: str, message: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise PydanticCustomError(error_type, message)


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    admin = "ADMIN"
    recruiter = "RECRUITER"
    applicant = "APPLICANT"


class JobType(str, Enum):
    full_time = "Full-time"
    part_time = "Part-time"
    contract = "Contract"


class JobStatus(str, Enum):
    active = "ACTIVE"
    inactive = "INACTIVE"
    closed = "CLOSED"


class CandidateStatus(str, Enum):
    pending = "PENDING"
    interviewed = "INTERVIEWED"
    shortlisted = "SHORTLISTED"
    rejected = "REJECTED"
    hired = "HIRED"


class Recommendation(str, Enum):
    hire = "Hire"
    consider = "Consider"
    reject = "Reject"


class StageName(str, Enum):
    introduction = "introduction"
    technical = "technical"
    behavioral = "behavioral"
    case_study = "case_study"
    system_design = "system_design"
    closing = "closing"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str
    password: str
    role: UserRole

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return check_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        return check_password(v)

    @field_validator("role", mode="before")
    @classmethod
    def validate_role(cls, v):
        return _enum_check(UserRole, v, "invalid_role", "Invalid role")


class LoginRequest(ApiModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return check_email(v)


class UserOut(ApiModel):
    id: int
    email: str
    name: str
    role: UserRole


class AuthResponse(ApiModel):
    token: str
    user: UserOut


class ValidateResponse(ApiModel):
    user: UserOut


class ResetPasswordRequest(ApiModel):
    email: str = ""


class ResetPasswordConfirm(ApiModel):
    token: str = ""
    new_password: str = ""


class ChangePasswordRequest(ApiModel):
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_password(cls, v):
        return check_password(v)


# ============================================================
# USER SCHEMAS
# ============================================================

class ProfileUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return check_email(v) if v is not None else v


class UserProfile(ApiModel):
    id: int
    name: str
    email: str
    role: UserRole
    is_active: bool
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    created_at: datetime


class RoleUpdate(ApiModel):
    role: UserRole

    @field_validator("role", mode="before")
    @classmethod
    def validate_role(cls, v):
        return _enum_check(UserRole, v, "invalid_role", "Invalid role")


class StatusUpdate(ApiModel):
    is_active: bool


# ============================================================
# JOB SCHEMAS
# ============================================================

def _check_title(v):
    if v is None or not v.strip():
        raise PydanticCustomError("title_required", "Title is required")
    return v.strip()


def _check_url(v):
    if v and not (v.startswith("http://") or v.startswith("https://")):
        raise PydanticCustomError("invalid_url", "Invalid URL")
    return v or None


class JobCreate(ApiModel):
    title: str = Field("", validate_default=True)
    department: Optional[str] = None
    location: Optional[str] = None
    type: JobType = JobType.full_time
    salary: Optional[str] = None
    description: Optional[str] = None
    requirements: List[str] = []
    skills: List[str] = []
    external_url: Optional[str] = None
    status: JobStatus = JobStatus.active

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _check_title(v)

    @field_validator("external_url")
    @classmethod
    def validate_url(cls, v):
        return _check_url(v)

    @field_validator("type", mode="before")
    @classmethod
    def validate_type(cls, v):
        return _enum_check(JobType, v, "invalid_job_type", "Invalid job type")

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        return _enum_check(JobStatus, v, "invalid_status", "Invalid status")


class JobUpdate(ApiModel):
    title: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    type: Optional[JobType] = None
    salary: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[List[str]] = None
    skills: Optional[List[str]] = None
    external_url: Optional[str] = None
    status: Optional[JobStatus] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _check_title(v) if v is not None else v

    @field_validator("external_url")
    @classmethod
    def validate_url(cls, v):
        return _check_url(v)

    @field_validator("type", mode="before")
    @classmethod
    def validate_type(cls, v):
        if v is None:
            return v
        return _enum_check(JobType, v, "invalid_job_type", "Invalid job type")

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        if v is None:
            return v
        return _enum_check(JobStatus, v, "invalid_status", "Invalid status")


class JobResponse(ApiModel):
    id: int
    title: str
    department: Optional[str] = None
    location: Optional[str] = None
    type: str
    salary: Optional[str] = None
    description: Optional[str] = None
    requirements: List[str] = []
    skills: List[str] = []
    external_url: Optional[str] = None
    status: str
    applicants: int = 0
    created_by: Optional[int] = None
    created_at: datetime
    posting: Optional[dict] = None


class JobListResponse(ApiModel):
    jobs: List[JobResponse]
    total: int
    page: int
    page_size: int


class JobOption(ApiModel):
    id: int
    title: str


# ============================================================
# JOB WIZARD SCHEMAS
# ============================================================

class DraftSetup(ApiModel):
    job_title: str = ""
    deadline: str = ""
    language: str = ""
    timezone: str = ""
    company: Optional[str] = None
    description: Optional[str] = None
    question_types: List[str] = ["technical"]
    difficulty: str = "intermediate"
    question_count: int = Field(5, ge=1, le=20)
    complexity: int = Field(3, ge=1, le=5)


class GeneratedQuestion(ApiModel):
    category: str = "General"
    question: str
    difficulty: str
    complexity: int
    estimated_time: int = 5
    key_points: List[str] = []


class QuestionTemplate(ApiModel):
    id: str
    name: str
    content: str


class DraftQuestionsUpdate(ApiModel):
    questions: List[str]


class TemplateRename(ApiModel):
    name: str = ""


class DraftCustomization(ApiModel):
    skills: List[str] = []
    experience: Optional[str] = None
    salary: Optional[str] = None
    location: Optional[str] = None
    remote: bool = False
    assessment: bool = False
    interview_rounds: int = Field(1, ge=1, le=10)
    coding_challenge: bool = False
    system_design: bool = False
    pair_programming: bool = False
    post_to_linkedin: bool = False
    post_to_indeed: bool = False


class DraftCandidates(ApiModel):
    candidates: List[str]

    @field_validator("candidates")
    @classmethod
    def validate_emails(cls, v):
        return [check_email(c) for c in v]


class JobDraftResponse(ApiModel):
    id: str
    active_step: int
    step_name: str
    setup: dict = {}
    questions: List[str] = []
    generated_questions: List[GeneratedQuestion] = []
    custom_questions: str = ""
    templates: List[QuestionTemplate] = []
    customization: dict = {}
    candidates: List[str] = []
    submitted: bool = False
    job_id: Optional[int] = None


class DraftSubmitResponse(ApiModel):
    job_id: int
    post_to_linkedin: bool
    post_to_indeed: bool
    message: str = "Job created successfully!"


class JobAssistantRequest(ApiModel):
    message: str = ""
    awaiting: Optional[Literal["jobTitle", "company"]] = None
    pending_job_title: Optional[str] = None
    pending_company: Optional[str] = None


class JobAssistantResponse(ApiModel):
    reply: str
    awaiting: Optional[Literal["jobTitle", "company"]] = None
    pending_job_title: Optional[str] = None
    pending_company: Optional[str] = None
    draft_id: Optional[str] = None


# ============================================================
# QUESTION SCHEMAS
# ============================================================

class QuestionCreate(ApiModel):
    job_id: int
    text: str = ""


class QuestionUpdate(ApiModel):
    text: str = ""


class QuestionResponse(ApiModel):
    id: int
    job_id: int
    job_title: Optional[str] = None
    text: str
    generated_by: str
    created_at: datetime


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class JobRef(ApiModel):
    title: str


class ApplicationResponse(ApiModel):
    id: int
    job_id: int
    job: JobRef
    user_id: int
    full_name: str
    email: str
    phone: Optional[str] = None
    cover_letter: Optional[str] = None
    status: str
    resume_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class UploadResponse(ApiModel):
    file_path: str


# ============================================================
# CANDIDATE SCHEMAS
# ============================================================

class CandidateResponse(ApiModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    job_id: int
    job_title: str
    status: str
    interview_score: Optional[float] = None
    resume_url: Optional[str] = None
    last_updated: datetime


class CandidateStatusUpdate(ApiModel):
    status: CandidateStatus


class CompareRequest(ApiModel):
    candidate_ids: List[int]


# ============================================================
# SCHEDULE SCHEMAS
# ============================================================

class ScheduleCreate(ApiModel):
    application_id: Optional[int] = None
    user_id: Optional[int] = None
    job_id: Optional[int] = None
    date: Optional[datetime] = None


class ScheduleResponse(ApiModel):
    id: int
    application_id: int
    user_id: int
    job_id: int
    date: datetime
    created_at: datetime


# ============================================================
# INTERVIEW CHAT SCHEMAS
# ============================================================

class AnswerSubmit(ApiModel):
    question_id: Optional[int] = None
    answer: str = ""


class AnswerProgress(ApiModel):
    answered: int
    total: int
    completed: bool
    message: str


class RecordedAnswerCreate(ApiModel):
    schedule_id: Optional[int] = None
    question_id: Optional[int] = None
    response_url: Optional[str] = None


class RecordedAnswerResponse(ApiModel):
    id: int
    schedule_id: int
    question_id: int
    response_url: str


# ============================================================
# INTERVIEW BOT SCHEMAS
# ============================================================

class JobDetails(ApiModel):
    title: str
    description: str = ""
    requirements: List[str] = []
    skills: List[str] = []


class ApplicantDetails(ApiModel):
    name: str
    experience: str = ""
    education: str = ""
    skills: List[str] = []


class ChatMessage(ApiModel):
    role: Literal["user", "assistant"]
    content: str
    timestamp: Optional[datetime] = None


class Analysis(ApiModel):
    technical_score: int = 0
    communication_score: int = 0
    cultural_fit_score: int = 0
    strengths: List[str] = []
    areas_for_improvement: List[str] = []
    overall_assessment: str = ""
    recommendation: Recommendation = Recommendation.consider


class FeedbackItem(Analysis):
    timestamp: datetime
    question: str
    response: str


class GenerateQuestionRequest(ApiModel):
    job_details: JobDetails
    applicant_details: ApplicantDetails
    interview_stage: StageName = StageName.introduction
    previous_messages: List[ChatMessage] = []


class QuestionReply(ApiModel):
    question: str


class TextResponseRequest(ApiModel):
    message: str = ""
    question: str = ""
    job_details: JobDetails
    applicant_details: ApplicantDetails


class ProcessedResponse(ApiModel):
    transcription: Optional[str] = None
    analysis: Analysis
    next_question: str


class SessionCreate(ApiModel):
    job_details: JobDetails
    applicant_details: ApplicantDetails
    application_id: Optional[int] = None


class SessionTextRequest(ApiModel):
    message: str = ""


class SessionResponse(ApiModel):
    id: str
    state: str
    stage: StageName
    stage_description: str
    time_remaining: int
    stage_progress: float
    current_question: str
    messages: List[ChatMessage]
    current_analysis: Optional[Analysis] = None
    feedback_history: List[FeedbackItem] = []
    report_id: Optional[str] = None


class StageInfo(ApiModel):
    name: StageName
    description: str
    duration: int
    tips: List[str]
    stage_tips: List[str]


class HelpGuide(ApiModel):
    title: str
    content: str
    tips: List[str]


# ============================================================
# REPORT SCHEMAS
# ============================================================

class ReportDetails(ApiModel):
    interview_score: Optional[float] = Field(None, ge=0, le=100)
    english_fluency: Optional[float] = Field(None, ge=0, le=100)
    technical_expertise: Optional[float] = Field(None, ge=0, le=100)
    ai_readiness: Optional[float] = Field(None, ge=0, le=100)
    team_fit: Optional[float] = Field(None, ge=0, le=100)
    notes: Optional[str] = None
    recommendations: Optional[str] = None


class ReportCreate(ApiModel):
    job_id: int
    candidate_id: int
    report_type: str = Field(..., min_length=1)
    details: ReportDetails


class ReportResponse(ApiModel):
    id: str
    job_id: Optional[int] = None
    job_title: str
    candidate_id: Optional[int] = None
    candidate_name: str
    report_type: str
    generated_date: datetime
    details: ReportDetails


# ============================================================
# DASHBOARD SCHEMAS
# ============================================================

class CandidateStages(ApiModel):
    applied: int
    interviewed: int
    shortlisted: int
    hired: int


class ActivityItem(ApiModel):
    action: str
    type: str
    time: datetime
    link: str


class UpcomingInterview(ApiModel):
    id: int
    candidate: str
    position: str
    date: datetime


class PerformanceMetrics(ApiModel):
    total_hires: int
    active_interviews: int
    avg_interview_score: Optional[float] = None


class DashboardResponse(ApiModel):
    active_jobs: int
    applicants_per_job: int
    candidate_stages: CandidateStages
    recent_activity: List[ActivityItem]
    upcoming_interviews: List[UpcomingInterview]
    performance_metrics: PerformanceMetrics


class AssistantTurn(ApiModel):
    sender: Literal["user", "bot"]
    message: str


class AssistantChatRequest(ApiModel):
    message: str = ""
    history: List[AssistantTurn] = []


class AssistantChatResponse(ApiModel):
    reply: str


# ============================================================
# SETTINGS SCHEMAS
# ============================================================

class AccountSettings(ApiModel):
    company_name: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None


class IntegrationSettings(ApiModel):
    linkedin_connected: Optional[bool] = None
    linkedin_username: Optional[str] = None
    indeed_connected: Optional[bool] = None
    indeed_username: Optional[str] = None


class AISettings(ApiModel):
    model: Optional[str] = None
    temperature: Optional[float] = Field(None, ge=0, le=2)
    question_count: Optional[int] = Field(None, ge=1, le=20)
    difficulty: Optional[Literal["beginner", "intermediate", "advanced", "expert"]] = None


class CustomizationSettings(ApiModel):
    theme: Optional[Literal["dark", "light"]] = None
    brand_name: Optional[str] = None
    primary_color: Optional[str] = None


class SettingsResponse(ApiModel):
    account: dict = {}
    integrations: dict = {}
    ai: dict = {}
    customization: dict = {}


# ============================================================
# ONBOARDING SCHEMAS
# ============================================================

class OnboardingAnswer(ApiModel):
    answer: str = ""


class OnboardingState(ApiModel):
    step: int
    step_name: str
    prompt: str
    answers: dict
    completed: bool


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(ApiModel):
    message: str
    success: bool = True


class ErrorResponse(ApiModel):
    detail: str
