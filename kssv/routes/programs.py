"""
Programs, activities, tasks and their M&E records, plus analytics and export.
"""

from __future__ import annotations

import logging
from datetime import datetime, time, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from kssv import programs as hierarchy
from kssv.config import get_settings
from kssv.db import DbClient, ListQuery, utcnow
from kssv.dependencies import get_db_client
from kssv.errors import not_found, require_fields
from kssv.export import SUPPORTED_FORMATS, build_program_sheets, render_csv_files
from kssv.metrics import program_analytics
from kssv.routes.common import (
    clean_filters,
    create_row,
    deleted,
    get_or_404,
    require_parent,
    update_row,
    update_values,
)
from kssv.schemas import (
    ActivityPayload,
    AnalyticsResponse,
    DeleteResponse,
    ExportRequest,
    ExportResponse,
    ProgramPayload,
    RiskAssessmentPayload,
    TaskEvaluationPayload,
    TaskPayload,
)

logger = logging.getLogger(__name__)

router = APIRouter()

PROGRAM_REQUIRED = ("name", "year")
ACTIVITY_REQUIRED = ("program_id", "name")
TASK_REQUIRED = ("activity_id", "name")
EVALUATION_REQUIRED = ("progress_rating", "quality_rating")
RISK_REQUIRED = ("task_id", "risk_description")


def _year(value: Optional[str]) -> Optional[int]:
    if value is None or value in ("", "all"):
        return None
    try:
        return int(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid year: {value}") from None


def _program_query(
    program_id: Optional[str] = None,
    status: Optional[str] = None,
    year: Optional[str] = None,
    focus_area: Optional[str] = None,
) -> ListQuery:
    return ListQuery(
        filters=clean_filters(
            id=program_id, status=status, year=_year(year), focus_area=focus_area
        )
    )


# Programs


@router.get("/programs")
def list_programs(
    status: Optional[str] = None,
    year: Optional[str] = None,
    focus_area: Optional[str] = None,
    db: DbClient = Depends(get_db_client),
):
    return hierarchy.load_programs(
        db, _program_query(status=status, year=year, focus_area=focus_area)
    )


@router.post("/programs", status_code=201)
def create_program(payload: ProgramPayload, db: DbClient = Depends(get_db_client)):
    row = create_row(
        db,
        "programs",
        payload,
        required=PROGRAM_REQUIRED,
        defaults={"location": get_settings().default_location},
    )
    return hierarchy.attach_activities(db, [row])[0]


@router.get("/programs/{program_id}")
def get_program(program_id: str, db: DbClient = Depends(get_db_client)):
    program = hierarchy.load_program(db, program_id)
    if not program:
        raise not_found("Program")
    return program


@router.put("/programs/{program_id}")
def update_program(
    program_id: str, payload: ProgramPayload, db: DbClient = Depends(get_db_client)
):
    row = update_row(
        db, "programs", program_id, payload, "Program", required=PROGRAM_REQUIRED
    )
    return hierarchy.attach_activities(db, [row])[0]


@router.delete("/programs/{program_id}", response_model=DeleteResponse)
def delete_program(program_id: str, db: DbClient = Depends(get_db_client)):
    if not hierarchy.delete_program(db, program_id):
        raise not_found("Program")
    return deleted("Program")


# Activities


@router.get("/activities")
def list_activities(
    program_id: Optional[str] = Query(None, alias="programId"),
    status: Optional[str] = None,
    db: DbClient = Depends(get_db_client),
):
    return db.list(
        "activities",
        ListQuery(filters=clean_filters(program_id=program_id, status=status)),
    )


@router.post("/activities", status_code=201)
def create_activity(payload: ActivityPayload, db: DbClient = Depends(get_db_client)):
    require_fields(payload, ACTIVITY_REQUIRED)
    require_parent(db, "programs", payload.program_id, "Program")
    return create_row(db, "activities", payload, required=ACTIVITY_REQUIRED)


@router.get("/activities/{activity_id}")
def get_activity(activity_id: str, db: DbClient = Depends(get_db_client)):
    activity = get_or_404(db, "activities", activity_id, "Activity")
    return hierarchy.attach_tasks(db, [activity])[0]


@router.put("/activities/{activity_id}")
def update_activity(
    activity_id: str, payload: ActivityPayload, db: DbClient = Depends(get_db_client)
):
    update_values(payload, ACTIVITY_REQUIRED, "activities")
    if payload.program_id:
        require_parent(db, "programs", payload.program_id, "Program")
    return update_row(
        db,
        "activities",
        activity_id,
        payload,
        "Activity",
        required=ACTIVITY_REQUIRED,
    )


@router.delete("/activities/{activity_id}", response_model=DeleteResponse)
def delete_activity(activity_id: str, db: DbClient = Depends(get_db_client)):
    if not hierarchy.delete_activity(db, activity_id):
        raise not_found("Activity")
    return deleted("Activity")


# Tasks


@router.get("/tasks")
def list_tasks(
    activity_id: Optional[str] = Query(None, alias="activityId"),
    db: DbClient = Depends(get_db_client),
):
    tasks = db.list("tasks", ListQuery(filters=clean_filters(activity_id=activity_id)))
    return [hierarchy.load_task(db, task) for task in tasks]


@router.post("/tasks", status_code=201)
def create_task(payload: TaskPayload, db: DbClient = Depends(get_db_client)):
    require_fields(payload, TASK_REQUIRED)
    require_parent(db, "activities", payload.activity_id, "Activity")
    row = create_row(db, "tasks", payload, required=TASK_REQUIRED)
    return hierarchy.load_task(db, row)


@router.get("/tasks/{task_id}")
def get_task(task_id: str, db: DbClient = Depends(get_db_client)):
    return hierarchy.load_task(db, get_or_404(db, "tasks", task_id, "Task"))


@router.put("/tasks/{task_id}")
def update_task(
    task_id: str, payload: TaskPayload, db: DbClient = Depends(get_db_client)
):
    update_values(payload, TASK_REQUIRED, "tasks")
    if payload.activity_id:
        require_parent(db, "activities", payload.activity_id, "Activity")
    row = update_row(db, "tasks", task_id, payload, "Task", required=TASK_REQUIRED)
    return hierarchy.load_task(db, row)


@router.delete("/tasks/{task_id}", response_model=DeleteResponse)
def delete_task(task_id: str, db: DbClient = Depends(get_db_client)):
    if not hierarchy.delete_task(db, task_id):
        raise not_found("Task")
    return deleted("Task")


@router.get("/tasks/{task_id}/evaluation")
def list_task_evaluations(task_id: str, db: DbClient = Depends(get_db_client)):
    get_or_404(db, "tasks", task_id, "Task")
    return db.list(
        "task_evaluations",
        ListQuery(filters={"task_id": task_id}, order_by="evaluation_date"),
    )


@router.post("/tasks/{task_id}/evaluation", status_code=201)
def create_task_evaluation(
    task_id: str,
    payload: TaskEvaluationPayload,
    db: DbClient = Depends(get_db_client),
):
    require_fields(payload, EVALUATION_REQUIRED)
    get_or_404(db, "tasks", task_id, "Task")
    return create_row(
        db,
        "task_evaluations",
        payload,
        required=EVALUATION_REQUIRED,
        defaults={"evaluation_date": utcnow()},
        overrides={"task_id": task_id},
    )


@router.get("/tasks/{task_id}/risks")
def list_task_risks(task_id: str, db: DbClient = Depends(get_db_client)):
    get_or_404(db, "tasks", task_id, "Task")
    return db.list("risk_assessments", ListQuery(filters={"task_id": task_id}))


@router.post("/risks", status_code=201)
def create_risk(payload: RiskAssessmentPayload, db: DbClient = Depends(get_db_client)):
    require_fields(payload, RISK_REQUIRED)
    require_parent(db, "tasks", payload.task_id, "Task")
    return create_row(db, "risk_assessments", payload, required=RISK_REQUIRED)


@router.put("/risks/{risk_id}")
def update_risk(
    risk_id: str, payload: RiskAssessmentPayload, db: DbClient = Depends(get_db_client)
):
    update_values(payload, RISK_REQUIRED, "risk_assessments")
    if payload.task_id:
        require_parent(db, "tasks", payload.task_id, "Task")
    return update_row(
        db,
        "risk_assessments",
        risk_id,
        payload,
        "Risk assessment",
        required=RISK_REQUIRED,
    )


@router.delete("/risks/{risk_id}", response_model=DeleteResponse)
def delete_risk(risk_id: str, db: DbClient = Depends(get_db_client)):
    if not db.delete("risk_assessments", risk_id):
        raise not_found("Risk assessment")
    return deleted("Risk assessment")


# Analytics and export


@router.get("/analytics", response_model=AnalyticsResponse)
def get_analytics(
    program_id: Optional[str] = Query(None, alias="programId"),
    focus_area: Optional[str] = Query(None, alias="focusArea"),
    year: Optional[str] = None,
    db: DbClient = Depends(get_db_client),
):
    programs = hierarchy.load_programs(
        db, _program_query(program_id=program_id, year=year, focus_area=focus_area)
    )
    return program_analytics(programs, get_settings().focus_areas)


def _export_query(request: ExportRequest) -> ListQuery:
    if request.scope == "current":
        if not request.program_id:
            raise HTTPException(
                status_code=400, detail="programId is required for the current scope"
            )
        return ListQuery(filters={"id": request.program_id})
    if request.scope == "dateRange":
        if not request.start_date or not request.end_date:
            raise HTTPException(
                status_code=400,
                detail="startDate and endDate are required for the dateRange scope",
            )
        low = datetime.combine(request.start_date, time.min, tzinfo=timezone.utc)
        high = datetime.combine(request.end_date, time.max, tzinfo=timezone.utc)
        return ListQuery(ranges={"created_at": (low, high)})
    return ListQuery()


def collect_export_files(db: DbClient, request: ExportRequest) -> dict[str, str]:
    """Render the selected program data as ``{"<sheet>.csv": text}``."""
    programs = hierarchy.load_programs(db, _export_query(request))
    evaluations: list[dict] = []
    risks: list[dict] = []
    if request.include_me_data:
        task_ids = [
            task["id"]
            for program in programs
            for activity in program["activities"]
            for task in activity["tasks"]
        ]
        if task_ids:
            me_query = ListQuery(filters={"task_id": task_ids})
            evaluations = db.list("task_evaluations", me_query)
            risks = db.list("risk_assessments", me_query)
    sheets = build_program_sheets(
        programs,
        include_program_details=request.include_program_details,
        include_activities=request.include_activities,
        include_tasks=request.include_tasks,
        include_me_data=request.include_me_data,
        include_analytics=request.include_analytics,
        evaluations=evaluations,
        risks=risks,
        focus_areas=get_settings().focus_areas,
    )
    return render_csv_files(sheets)


@router.post("/export", response_model=ExportResponse)
def export_programs(request: ExportRequest, db: DbClient = Depends(get_db_client)):
    files = collect_export_files(db, request)
    logger.info(
        "Generated %s export with %d file(s) for scope %s",
        request.format,
        len(files),
        request.scope,
    )
    if request.format not in SUPPORTED_FORMATS:
        return JSONResponse(
            status_code=501,
            content={
                "error": f"{request.format} export is not supported",
                "available_formats": SUPPORTED_FORMATS,
                "generated_files": sorted(files),
            },
        )
    return ExportResponse(files=files, message="Export generated successfully")
