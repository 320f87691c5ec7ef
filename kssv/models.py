"""
SQLAlchemy table declarations for the KSSV database.

Every table carries a string ``id`` primary key plus ``created_at`` and
``updated_at`` timestamps; the database clients fill these in.
"""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class TimestampedRow:
    id = Column(String, primary_key=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class AdminRow(TimestampedRow, Base):
    __tablename__ = "admins"

    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    role = Column(String, nullable=False, default="admin")


class BlogRow(TimestampedRow, Base):
    __tablename__ = "blog"

    title = Column(String, nullable=False)
    excerpt = Column(Text, nullable=True)
    content = Column(Text, nullable=False)
    category = Column(String, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    author = Column(String, nullable=True)
    date = Column(Date, nullable=True, index=True)
    read_time = Column(String, nullable=True)
    image = Column(String, nullable=True)
    status = Column(String, nullable=False, default="draft", index=True)
    views = Column(Integer, nullable=False, default=0)


class DonationRow(TimestampedRow, Base):
    __tablename__ = "donations"

    donor_name = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=True, index=True)
    method = Column(String, nullable=True)
    message = Column(Text, nullable=True)


class MessageRow(TimestampedRow, Base):
    __tablename__ = "messages"

    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    message = Column(Text, nullable=True)
    replied = Column(Boolean, nullable=False, default=False)
    reply_text = Column(Text, nullable=True)


class PartnerRow(TimestampedRow, Base):
    __tablename__ = "partners"

    organization_name = Column(String, nullable=False)
    contact_person = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    partnership_type = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="pending")


class ProjectRow(TimestampedRow, Base):
    __tablename__ = "projects"

    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    full_description = Column(Text, nullable=True)
    category = Column(String, nullable=True, index=True)
    status = Column(String, nullable=True)
    progress = Column(Integer, nullable=False, default=0)
    location = Column(String, nullable=True)
    beneficiaries = Column(Integer, nullable=False, default=0)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    image_url = Column(String, nullable=True)
    objectives = Column(JSON, nullable=False, default=list)
    outcomes = Column(JSON, nullable=False, default=list)
    views = Column(Integer, nullable=False, default=0)
    date = Column(DateTime(timezone=True), nullable=True)


class TestimonialRow(TimestampedRow, Base):
    __tablename__ = "testimonials"

    name = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    role = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    approved = Column(Boolean, nullable=False, default=False)


class VolunteerRow(TimestampedRow, Base):
    __tablename__ = "volunteers"

    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    availability = Column(String, nullable=True)
    interests = Column(Text, nullable=True)
    experience = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="pending")


class MemberRow(TimestampedRow, Base):
    __tablename__ = "members"

    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    location = Column(String, nullable=True)
    motivation = Column(Text, nullable=True)
    skills = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="pending")


class ProgramRow(TimestampedRow, Base):
    __tablename__ = "programs"

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    year = Column(Integer, nullable=True, index=True)
    status = Column(String, nullable=False, default="planned", index=True)
    public_visible = Column(Boolean, nullable=False, default=True)
    budget_total = Column(Float, nullable=False, default=0)
    focus_area = Column(String, nullable=True, index=True)
    program_image = Column(String, nullable=True)
    strategic_objective = Column(Text, nullable=True)
    location = Column(String, nullable=True)


class ActivityRow(TimestampedRow, Base):
    __tablename__ = "activities"

    program_id = Column(
        String, ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    outcome = Column(Text, nullable=True)
    kpi = Column(Text, nullable=True)
    timeline_start = Column(Date, nullable=True)
    timeline_end = Column(Date, nullable=True)
    budget_allocated = Column(Float, nullable=False, default=0)
    budget_utilized = Column(Float, nullable=False, default=0)
    status = Column(String, nullable=False, default="planned")
    responsible_person = Column(String, nullable=True)
    progress = Column(Integer, nullable=False, default=0)
    challenges = Column(Text, nullable=True)
    next_steps = Column(Text, nullable=True)


class TaskRow(TimestampedRow, Base):
    __tablename__ = "tasks"

    activity_id = Column(
        String, ForeignKey("activities.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String, nullable=False)
    target = Column(Integer, nullable=True)
    task_timeline = Column(String, nullable=True)
    activity_timeline = Column(Date, nullable=True)
    budget = Column(Float, nullable=False, default=0)
    output = Column(Text, nullable=True)
    outcome = Column(Text, nullable=True)
    evaluation_criteria = Column(Text, nullable=True)
    risks = Column(Text, nullable=True)
    mitigation_measures = Column(Text, nullable=True)
    resource_person = Column(String, nullable=True)
    status = Column(Integer, nullable=False, default=0)
    learning_and_development = Column(Text, nullable=True)
    self_evaluation = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)


class TaskEvaluationRow(TimestampedRow, Base):
    __tablename__ = "task_evaluations"

    task_id = Column(
        String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    evaluation_date = Column(DateTime(timezone=True), nullable=False)
    progress_rating = Column(Integer, nullable=True)
    quality_rating = Column(Integer, nullable=True)
    challenges_encountered = Column(Text, nullable=True)
    success_factors = Column(Text, nullable=True)
    adjustments_made = Column(Text, nullable=True)
    lessons_learned = Column(Text, nullable=True)
    recommendations = Column(Text, nullable=True)
    evaluator_name = Column(String, nullable=True)
    next_evaluation_date = Column(Date, nullable=True)


class RiskAssessmentRow(TimestampedRow, Base):
    __tablename__ = "risk_assessments"

    task_id = Column(
        String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    risk_description = Column(Text, nullable=False)
    probability = Column(String, nullable=False, default="low")
    impact = Column(String, nullable=False, default="low")
    mitigation_strategy = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="open")
    assigned_to = Column(String, nullable=True)


class WorkplanRow(TimestampedRow, Base):
    __tablename__ = "work_plans"

    focus_area = Column(String, nullable=False, index=True)
    activity_name = Column(String, nullable=False)
    timeline_text = Column(String, nullable=False)
    quarter = Column(String, nullable=True, index=True)
    tasks_description = Column(Text, nullable=False)
    target = Column(String, nullable=True)
    budget_allocated = Column(Float, nullable=False, default=0)
    output = Column(Text, nullable=True)
    outcome = Column(Text, nullable=True)
    kpi = Column(Text, nullable=True)
    means_of_verification = Column(Text, nullable=True)
    risks = Column(Text, nullable=True)
    mitigation_measures = Column(Text, nullable=True)
    resource_person = Column(String, nullable=True)
    status = Column(String, nullable=False, default="planned", index=True)
    progress = Column(Integer, nullable=False, default=0)
    learning_development = Column(Text, nullable=True)
    self_evaluation = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    public_visible = Column(Boolean, nullable=False, default=True)
    program_image = Column(String, nullable=True)


class MerlEntryRow(TimestampedRow, Base):
    __tablename__ = "merl_entries"

    workplan_id = Column(
        String, ForeignKey("work_plans.id", ondelete="CASCADE"), nullable=False, index=True
    )
    output = Column(Text, nullable=True)
    outcome = Column(Text, nullable=True)
    kpi = Column(Text, nullable=True)
    means_of_verification = Column(Text, nullable=True)
    risks = Column(Text, nullable=True)
    mitigation_measures = Column(Text, nullable=True)
    learning_development = Column(Text, nullable=True)
    self_evaluation = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    merl_status = Column(String, nullable=False, default="draft")


class CaseRegisterRow(TimestampedRow, Base):
    __tablename__ = "case_registers"

    case_id = Column(String, nullable=False, unique=True, index=True)
    case_status = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    contact_no = Column(String, nullable=True)
    emergency_no = Column(String, nullable=True)
    consent_status = Column(Boolean, nullable=False, default=False)
    date_sharing_consent = Column(Date, nullable=True)


class CaseAssessmentRow(TimestampedRow, Base):
    __tablename__ = "case_assessments"

    case_id = Column(
        String,
        ForeignKey("case_registers.case_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date_of_intake = Column(Date, nullable=True)
    service_needs = Column(JSON, nullable=False, default=list)
    safety_risk_level = Column(String, nullable=False, index=True)
    primary_goal = Column(Text, nullable=True)
    services_provided_log = Column(Text, nullable=True)
    referral_tracking = Column(Text, nullable=True)
    case_notes = Column(Text, nullable=True)
    case_closure = Column(Boolean, nullable=False, default=False)
    reason_for_closure = Column(Text, nullable=True)


class CaseServiceRow(TimestampedRow, Base):
    __tablename__ = "case_services"

    case_id = Column(
        String,
        ForeignKey("case_registers.case_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    service_date = Column(Date, nullable=False, index=True)
    service_type = Column(String, nullable=False, index=True)
    service_provider = Column(String, nullable=True)
    actions_taken = Column(Text, nullable=True)
    notes_observations = Column(Text, nullable=True)
    next_steps = Column(Text, nullable=True)
    follow_up_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default="SCHEDULED", index=True)


class CarouselImageRow(TimestampedRow, Base):
    __tablename__ = "carousel_images"

    image_url = Column(String, nullable=False)
    title = Column(String, nullable=True)
    caption = Column(Text, nullable=True)
    order_index = Column(Integer, nullable=False, default=0)


class BrandingRow(TimestampedRow, Base):
    __tablename__ = "branding"

    site_name = Column(String, nullable=True)
    tagline = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)
    primary_color = Column(String, nullable=True)
    secondary_color = Column(String, nullable=True)
