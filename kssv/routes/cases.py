"""
Survivor case management: case register, risk assessments and service logs.

Cases are addressed by their human-readable ``case_id`` (e.g. ``KSSV001``)
rather than the row id.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from kssv.config import get_settings
from kssv.db import DbClient, ListQuery
from kssv.dependencies import get_db_client
from kssv.errors import not_found, require_fields
from kssv.metrics import case_stats
from kssv.routes.common import (
    clean_filters,
    create_row,
    delete_row,
    deleted,
    get_or_404,
    require_parent,
    update_row,
    update_values,
)
from kssv.schemas import (
    CaseAssessmentPayload,
    CaseRegisterPayload,
    CaseServicePayload,
    CaseStatsResponse,
    DeleteResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/case-management")

CASE_SEARCH_COLUMNS = ("case_id", "name")
CASE_DETAILS_REQUIRED = ("name", "case_status")
CASE_REQUIRED = ("case_id",) + CASE_DETAILS_REQUIRED
ASSESSMENT_REQUIRED = ("case_id", "safety_risk_level")
SERVICE_REQUIRED = ("case_id", "service_type", "service_date")


def next_case_id(db: DbClient, prefix: str) -> str:
    """Return ``<prefix>NNN`` one past the highest numbered case id in use."""
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    max_seq = 0
    for row in db.list("case_registers", ListQuery(order_by=None)):
        match = pattern.match(row.get("case_id") or "")
        if match:
            max_seq = max(max_seq, int(match.group(1)))
    return f"{prefix}{max_seq + 1:03d}"


# Case register


@router.get("/cases")
def list_cases(
    status: Optional[str] = None,
    search: Optional[str] = None,
    db: DbClient = Depends(get_db_client),
):
    return db.list(
        "case_registers",
        ListQuery(
            filters=clean_filters(case_status=status),
            search=search or None,
            search_columns=CASE_SEARCH_COLUMNS,
        ),
    )


@router.post("/cases", status_code=201)
def create_case(payload: CaseRegisterPayload, db: DbClient = Depends(get_db_client)):
    require_fields(payload, CASE_DETAILS_REQUIRED)
    if not payload.case_id:
        payload.case_id = next_case_id(db, get_settings().case_id_prefix)
    elif db.get("case_registers", payload.case_id, key="case_id"):
        raise HTTPException(
            status_code=400, detail=f"Case {payload.case_id} already exists"
        )
    return create_row(db, "case_registers", payload, required=CASE_REQUIRED)


@router.get("/cases/{case_id}")
def get_case(case_id: str, db: DbClient = Depends(get_db_client)):
    return get_or_404(db, "case_registers", case_id, "Case", key="case_id")


@router.put("/cases/{case_id}")
def update_case(
    case_id: str, payload: CaseRegisterPayload, db: DbClient = Depends(get_db_client)
):
    values = update_values(payload, CASE_REQUIRED, "case_registers")
    # case_id is the stable key children refer to
    values.pop("case_id", None)
    if not values:
        raise HTTPException(status_code=400, detail="No data provided for update")
    row = db.update("case_registers", case_id, values, key="case_id")
    if not row:
        raise not_found("Case")
    logger.info("Updated case %s", case_id)
    return row


@router.delete("/cases/{case_id}", response_model=DeleteResponse)
def delete_case(case_id: str, db: DbClient = Depends(get_db_client)):
    get_or_404(db, "case_registers", case_id, "Case", key="case_id")
    assessments = db.delete("case_assessments", case_id, key="case_id")
    services = db.delete("case_services", case_id, key="case_id")
    db.delete("case_registers", case_id, key="case_id")
    logger.info(
        "Deleted case %s with %d assessments and %d services",
        case_id,
        assessments,
        services,
    )
    return deleted("Case")


# Assessments


@router.get("/assessments")
def list_assessments(
    case_id: Optional[str] = None,
    risk_level: Optional[str] = None,
    db: DbClient = Depends(get_db_client),
):
    return db.list(
        "case_assessments",
        ListQuery(filters=clean_filters(case_id=case_id, safety_risk_level=risk_level)),
    )


@router.post("/assessments", status_code=201)
def create_assessment(
    payload: CaseAssessmentPayload, db: DbClient = Depends(get_db_client)
):
    require_fields(payload, ASSESSMENT_REQUIRED)
    require_parent(db, "case_registers", payload.case_id, "Case", key="case_id")
    return create_row(db, "case_assessments", payload, required=ASSESSMENT_REQUIRED)


@router.get("/assessments/{assessment_id}")
def get_assessment(assessment_id: str, db: DbClient = Depends(get_db_client)):
    return get_or_404(db, "case_assessments", assessment_id, "Assessment")


@router.put("/assessments/{assessment_id}")
def update_assessment(
    assessment_id: str,
    payload: CaseAssessmentPayload,
    db: DbClient = Depends(get_db_client),
):
    update_values(payload, ASSESSMENT_REQUIRED, "case_assessments")
    if payload.case_id:
        require_parent(db, "case_registers", payload.case_id, "Case", key="case_id")
    return update_row(
        db,
        "case_assessments",
        assessment_id,
        payload,
        "Assessment",
        required=ASSESSMENT_REQUIRED,
    )


@router.delete("/assessments/{assessment_id}", response_model=DeleteResponse)
def delete_assessment(assessment_id: str, db: DbClient = Depends(get_db_client)):
    return delete_row(db, "case_assessments", assessment_id, "Assessment")


# Services


@router.get("/services")
def list_services(
    case_id: Optional[str] = None,
    service_type: Optional[str] = None,
    status: Optional[str] = None,
    db: DbClient = Depends(get_db_client),
):
    return db.list(
        "case_services",
        ListQuery(
            filters=clean_filters(
                case_id=case_id, service_type=service_type, status=status
            ),
            order_by="service_date",
        ),
    )


@router.post("/services", status_code=201)
def create_service(payload: CaseServicePayload, db: DbClient = Depends(get_db_client)):
    require_fields(payload, SERVICE_REQUIRED)
    require_parent(db, "case_registers", payload.case_id, "Case", key="case_id")
    return create_row(db, "case_services", payload, required=SERVICE_REQUIRED)


@router.get("/services/{service_id}")
def get_service(service_id: str, db: DbClient = Depends(get_db_client)):
    return get_or_404(db, "case_services", service_id, "Service")


@router.put("/services/{service_id}")
def update_service(
    service_id: str,
    payload: CaseServicePayload,
    db: DbClient = Depends(get_db_client),
):
    update_values(payload, SERVICE_REQUIRED, "case_services")
    if payload.case_id:
        require_parent(db, "case_registers", payload.case_id, "Case", key="case_id")
    return update_row(
        db,
        "case_services",
        service_id,
        payload,
        "Service",
        required=SERVICE_REQUIRED,
    )


@router.delete("/services/{service_id}", response_model=DeleteResponse)
def delete_service(service_id: str, db: DbClient = Depends(get_db_client)):
    return delete_row(db, "case_services", service_id, "Service")


@router.get("/stats", response_model=CaseStatsResponse)
def get_case_stats(db: DbClient = Depends(get_db_client)):
    unordered = ListQuery(order_by=None)
    return case_stats(
        db.list("case_registers", unordered),
        db.list("case_assessments", unordered),
        db.list("case_services", unordered),
    )
