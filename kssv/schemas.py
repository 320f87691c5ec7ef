"""
Pydantic schemas for the KSSV API.

Request payloads declare every field optional so the routes can report all
missing required fields at once; blank strings are treated as absent.
"""

from __future__ import annotations

import datetime as dt
from datetime import date, datetime, timezone
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def create_values(self) -> dict:
        return self.model_dump(exclude_none=True)

    def update_values(self) -> dict:
        return self.model_dump(exclude_unset=True)


def camel(name: str, snake: str):
    return Field(default=None, validation_alias=AliasChoices(name, snake))


PublicStatus = Literal["pending", "approved", "rejected"]


class AdminPayload(Payload):
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[Literal["superadmin", "admin"]] = None


class BlogPayload(Payload):
    title: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[list[str]] = None
    author: Optional[str] = None
    date: Optional[dt.date] = None
    read_time: Optional[str] = None
    image: Optional[str] = None
    status: Optional[Literal["draft", "published"]] = None


class DonationPayload(Payload):
    donor_name: Optional[str] = None
    amount: Optional[float] = Field(default=None, gt=0)
    date: Optional[dt.date] = None
    method: Optional[Literal["mpesa", "paypal", "bank_transfer"]] = None
    message: Optional[str] = None


class MessagePayload(Payload):
    first_name: Optional[str] = camel("firstName", "first_name")
    last_name: Optional[str] = camel("lastName", "last_name")
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None
    replied: Optional[bool] = None
    reply_text: Optional[str] = camel("replyText", "reply_text")

    @field_validator("first_name", "last_name", "email", "phone", "message", "reply_text")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value else value


class PartnerPayload(Payload):
    organization_name: Optional[str] = camel("organizationName", "organization_name")
    contact_person: Optional[str] = camel("contactPerson", "contact_person")
    email: Optional[str] = None
    phone: Optional[str] = None
    partnership_type: Optional[str] = camel("partnershipType", "partnership_type")
    description: Optional[str] = None
    status: Optional[PublicStatus] = None


class ProjectPayload(Payload):
    title: Optional[str] = None
    description: Optional[str] = None
    full_description: Optional[str] = None
    category: Optional[str] = None
    status: Optional[Literal["active", "completed", "paused", "planned"]] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    location: Optional[str] = None
    beneficiaries: Optional[int] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    image_url: Optional[str] = None
    objectives: Optional[list[str]] = None
    outcomes: Optional[list[str]] = None


class TestimonialPayload(Payload):
    name: Optional[str] = None
    message: Optional[str] = None
    role: Optional[str] = None
    avatar_url: Optional[str] = None
    approved: Optional[bool] = None


class VolunteerPayload(Payload):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    availability: Optional[str] = None
    interests: Optional[str] = None
    experience: Optional[str] = None
    status: Optional[PublicStatus] = None


class MemberPayload(Payload):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    motivation: Optional[str] = None
    skills: Optional[str] = None
    status: Optional[PublicStatus] = None


class ProgramPayload(Payload):
    name: Optional[str] = None
    description: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=1900, le=2100)
    status: Optional[Literal["active", "completed", "planned"]] = None
    public_visible: Optional[bool] = None
    budget_total: Optional[float] = Field(default=None, ge=0)
    focus_area: Optional[str] = None
    program_image: Optional[str] = None
    strategic_objective: Optional[str] = None
    location: Optional[str] = None


class ActivityPayload(Payload):
    program_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    outcome: Optional[str] = None
    kpi: Optional[str] = None
    timeline_start: Optional[date] = None
    timeline_end: Optional[date] = None
    budget_allocated: Optional[float] = Field(default=None, ge=0)
    budget_utilized: Optional[float] = Field(default=None, ge=0)
    status: Optional[
        Literal["planned", "in-progress", "completed", "on-hold", "cancelled"]
    ] = None
    responsible_person: Optional[str] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    challenges: Optional[str] = None
    next_steps: Optional[str] = None


class TaskPayload(Payload):
    activity_id: Optional[str] = None
    name: Optional[str] = None
    target: Optional[int] = None
    task_timeline: Optional[str] = None
    activity_timeline: Optional[date] = None
    budget: Optional[float] = Field(default=None, ge=0)
    output: Optional[str] = None
    outcome: Optional[str] = None
    evaluation_criteria: Optional[str] = None
    risks: Optional[str] = None
    mitigation_measures: Optional[str] = None
    resource_person: Optional[str] = None
    status: Optional[int] = Field(default=None, ge=0, le=10)
    learning_and_development: Optional[str] = None
    self_evaluation: Optional[str] = None
    notes: Optional[str] = None


class TaskEvaluationPayload(Payload):
    evaluation_date: Optional[datetime] = None
    progress_rating: Optional[int] = Field(default=None, ge=1, le=10)
    quality_rating: Optional[int] = Field(default=None, ge=1, le=10)
    challenges_encountered: Optional[str] = None
    success_factors: Optional[str] = None
    adjustments_made: Optional[str] = None
    lessons_learned: Optional[str] = None
    recommendations: Optional[str] = None
    evaluator_name: Optional[str] = None
    next_evaluation_date: Optional[date] = None

    @field_validator("evaluation_date")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


RiskLevel = Literal["low", "medium", "high"]


class RiskAssessmentPayload(Payload):
    task_id: Optional[str] = None
    risk_description: Optional[str] = None
    probability: Optional[RiskLevel] = None
    impact: Optional[RiskLevel] = None
    mitigation_strategy: Optional[str] = None
    status: Optional[Literal["open", "mitigated", "closed"]] = None
    assigned_to: Optional[str] = None


class WorkplanPayload(Payload):
    focus_area: Optional[str] = None
    activity_name: Optional[str] = None
    timeline_text: Optional[str] = None
    quarter: Optional[str] = None
    tasks_description: Optional[str] = None
    target: Optional[str] = None
    budget_allocated: Optional[float] = Field(default=None, ge=0)
    output: Optional[str] = None
    outcome: Optional[str] = None
    kpi: Optional[str] = None
    means_of_verification: Optional[str] = None
    risks: Optional[str] = None
    mitigation_measures: Optional[str] = None
    resource_person: Optional[str] = None
    status: Optional[str] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    learning_development: Optional[str] = None
    self_evaluation: Optional[str] = None
    notes: Optional[str] = None
    public_visible: Optional[bool] = None
    program_image: Optional[str] = None

    @field_validator("target", mode="before")
    @classmethod
    def target_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class MerlEntryPayload(Payload):
    workplan_id: Optional[str] = None
    output: Optional[str] = None
    outcome: Optional[str] = None
    kpi: Optional[str] = None
    means_of_verification: Optional[str] = None
    risks: Optional[str] = None
    mitigation_measures: Optional[str] = None
    learning_development: Optional[str] = None
    self_evaluation: Optional[str] = None
    notes: Optional[str] = None
    merl_status: Optional[Literal["draft", "in-review", "approved"]] = None


CaseStatus = Literal["ACTIVE", "ON_HOLD", "CLOSED", "INACTIVE"]
SafetyRiskLevel = Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]
ServiceNeed = Literal[
    "COUNSELING", "LEGAL", "MEDICAL", "SHELTER", "EMPLOYMENT", "EDUCATION", "OTHER"
]
ServiceType = Literal[
    "COUNSELING",
    "LEGAL_AID",
    "MEDICAL",
    "SHELTER",
    "EMPLOYMENT",
    "EDUCATION",
    "VOCATIONAL_TRAINING",
    "FAMILY_COUNSELING",
    "CRISIS_INTERVENTION",
    "OTHER",
]
ServiceStatus = Literal["SCHEDULED", "IN_PROGRESS", "COMPLETED", "CANCELLED"]


class CaseRegisterPayload(Payload):
    case_id: Optional[str] = Field(default=None, max_length=32)
    case_status: Optional[CaseStatus] = None
    name: Optional[str] = None
    contact_no: Optional[str] = None
    emergency_no: Optional[str] = None
    consent_status: Optional[bool] = None
    date_sharing_consent: Optional[date] = None


class CaseAssessmentPayload(Payload):
    case_id: Optional[str] = None
    date_of_intake: Optional[date] = None
    service_needs: Optional[list[ServiceNeed]] = None
    safety_risk_level: Optional[SafetyRiskLevel] = None
    primary_goal: Optional[str] = None
    services_provided_log: Optional[str] = None
    referral_tracking: Optional[str] = None
    case_notes: Optional[str] = None
    case_closure: Optional[bool] = None
    reason_for_closure: Optional[str] = None


class CaseServicePayload(Payload):
    case_id: Optional[str] = None
    service_date: Optional[date] = None
    service_type: Optional[ServiceType] = None
    service_provider: Optional[str] = None
    actions_taken: Optional[str] = None
    notes_observations: Optional[str] = None
    next_steps: Optional[str] = None
    follow_up_date: Optional[date] = None
    status: Optional[ServiceStatus] = None


class CarouselImagePayload(Payload):
    image_url: Optional[str] = None
    title: Optional[str] = None
    caption: Optional[str] = None
    order_index: Optional[int] = Field(default=None, ge=0)


class BrandingPayload(Payload):
    id: Optional[str] = None
    site_name: Optional[str] = None
    tagline: Optional[str] = None
    logo_url: Optional[str] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None


class ExportRequest(Payload):
    include_program_details: bool = Field(
        default=False,
        validation_alias=AliasChoices("includeProgramDetails", "include_program_details"),
    )
    include_activities: bool = Field(
        default=False,
        validation_alias=AliasChoices("includeActivities", "include_activities"),
    )
    include_tasks: bool = Field(
        default=False, validation_alias=AliasChoices("includeTasks", "include_tasks")
    )
    include_me_data: bool = Field(
        default=False, validation_alias=AliasChoices("includeMEData", "include_me_data")
    )
    include_analytics: bool = Field(
        default=False,
        validation_alias=AliasChoices("includeAnalytics", "include_analytics"),
    )
    format: Literal["csv", "excel", "pdf"] = "csv"
    scope: Literal["current", "all", "dateRange"] = "all"
    start_date: Optional[date] = camel("startDate", "start_date")
    end_date: Optional[date] = camel("endDate", "end_date")
    program_id: Optional[str] = camel("programId", "program_id")


# Responses


class DeleteResponse(BaseModel):
    success: Literal[True] = True
    message: str


class MessageCreatedResponse(BaseModel):
    success: Literal[True] = True
    message: str
    data: dict


class ProjectPage(BaseModel):
    projects: list[dict]
    total: int
    page: int
    totalPages: int
    hasMore: bool


class ImpactMetrics(BaseModel):
    beneficiaries_reached: float
    activities_completed: int
    budget_utilized: float
    success_rate: int


class AnalyticsOverview(BaseModel):
    total_programs: int
    overall_completion: int
    budget_utilization_rate: int
    total_beneficiaries: float


class TaskPerformance(BaseModel):
    on_track: int
    behind: int
    at_risk: int
    completed: int


class FocusAreaPerformance(BaseModel):
    area: str
    completion_rate: int
    budget_utilization: int
    task_success: int


class AnalyticsResponse(BaseModel):
    overview: AnalyticsOverview
    task_performance: TaskPerformance
    focus_area_performance: list[FocusAreaPerformance]


class CaseStatsResponse(BaseModel):
    total_cases: int
    active_cases: int
    closed_cases: int
    high_risk_cases: int
    services_this_month: int
    pending_assessments: int


class ExportResponse(BaseModel):
    files: dict[str, str]
    message: str


class ImportRowError(BaseModel):
    line: int
    error: str


class WorkplanImportResponse(BaseModel):
    message: str
    imported: list[dict]
    errors: list[ImportRowError]


class HealthResponse(BaseModel):
    status: Literal["ok"]
