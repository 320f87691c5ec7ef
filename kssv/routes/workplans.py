"""
Workplans, their CSV import, and the MERL entries recorded against them.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from kssv.db import DbClient, ListQuery
from kssv.dependencies import get_db_client
from kssv.errors import (
    describe_validation_errors,
    is_blank,
    not_found,
    require_fields,
)
from kssv.export import WORKPLAN_REQUIRED_COLUMNS, parse_workplan_csv
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
    DeleteResponse,
    MerlEntryPayload,
    WorkplanImportResponse,
    WorkplanPayload,
)

logger = logging.getLogger(__name__)

router = APIRouter()

WORKPLAN_DEFAULTS = {"status": "planned", "public_visible": True}
MERL_REQUIRED = ("workplan_id",)


def import_workplan_csv(db: DbClient, text: str) -> tuple[list[dict], list[dict]]:
    """
    Insert every valid CSV row as a workplan.

    Returns ``(imported_rows, errors)`` where each error names its CSV line.
    Raises ValueError when the header itself is unusable.
    """
    imported: list[dict] = []
    errors: list[dict] = []
    for line, values in parse_workplan_csv(text):
        missing = [c for c in WORKPLAN_REQUIRED_COLUMNS if is_blank(values.get(c))]
        if missing:
            errors.append(
                {"line": line, "error": f"Missing required fields: {', '.join(missing)}"}
            )
            continue
        try:
            payload = WorkplanPayload.model_validate(values)
        except ValidationError as exc:
            errors.append({"line": line, "error": describe_validation_errors(exc.errors())})
            continue
        imported.append(
            create_row(db, "work_plans", payload, defaults=WORKPLAN_DEFAULTS)
        )
    logger.info(
        "Imported %d workplan row(s), rejected %d", len(imported), len(errors)
    )
    return imported, errors


# Workplans


@router.get("/workplans")
def list_workplans(
    status: Optional[str] = None,
    quarter: Optional[str] = None,
    focus_area: Optional[str] = None,
    db: DbClient = Depends(get_db_client),
):
    return db.list(
        "work_plans",
        ListQuery(
            filters=clean_filters(status=status, quarter=quarter, focus_area=focus_area)
        ),
    )


@router.post("/workplans", status_code=201)
def create_workplan(payload: WorkplanPayload, db: DbClient = Depends(get_db_client)):
    return create_row(
        db,
        "work_plans",
        payload,
        required=WORKPLAN_REQUIRED_COLUMNS,
        defaults=WORKPLAN_DEFAULTS,
    )


@router.post(
    "/workplans/import", response_model=WorkplanImportResponse, status_code=201
)
async def import_workplans(
    file: UploadFile = File(...), db: DbClient = Depends(get_db_client)
):
    raw = await file.read()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=400, detail="CSV file must be UTF-8 encoded"
        ) from None
    try:
        imported, errors = import_workplan_csv(db, text)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    message = f"Imported {len(imported)} workplan(s) from {file.filename or 'upload'}"
    if not imported:
        return JSONResponse(
            status_code=400,
            content={
                "error": "No valid workplan rows found",
                "message": message,
                "imported": [],
                "errors": errors,
            },
        )
    return WorkplanImportResponse(message=message, imported=imported, errors=errors)


@router.get("/workplans/{workplan_id}")
def get_workplan(workplan_id: str, db: DbClient = Depends(get_db_client)):
    return get_or_404(db, "work_plans", workplan_id, "Workplan")


@router.put("/workplans/{workplan_id}")
def update_workplan(
    workplan_id: str, payload: WorkplanPayload, db: DbClient = Depends(get_db_client)
):
    return update_row(
        db,
        "work_plans",
        workplan_id,
        payload,
        "Workplan",
        required=WORKPLAN_REQUIRED_COLUMNS,
    )


@router.delete("/workplans/{workplan_id}", response_model=DeleteResponse)
def delete_workplan(workplan_id: str, db: DbClient = Depends(get_db_client)):
    get_or_404(db, "work_plans", workplan_id, "Workplan")
    entries = db.delete("merl_entries", workplan_id, key="workplan_id")
    db.delete("work_plans", workplan_id)
    logger.info("Deleted workplan %s with %d MERL entries", workplan_id, entries)
    return deleted("Workplan")


# MERL entries


@router.get("/merl")
def list_merl_entries(
    workplan_id: Optional[str] = None,
    merl_status: Optional[str] = None,
    db: DbClient = Depends(get_db_client),
):
    return db.list(
        "merl_entries",
        ListQuery(filters=clean_filters(workplan_id=workplan_id, merl_status=merl_status)),
    )


@router.post("/merl", status_code=201)
def create_merl_entry(
    payload: MerlEntryPayload, db: DbClient = Depends(get_db_client)
):
    require_fields(payload, MERL_REQUIRED)
    require_parent(db, "work_plans", payload.workplan_id, "Workplan")
    return create_row(db, "merl_entries", payload, required=MERL_REQUIRED)


@router.get("/merl/{entry_id}")
def get_merl_entry(entry_id: str, db: DbClient = Depends(get_db_client)):
    return get_or_404(db, "merl_entries", entry_id, "MERL entry")


@router.put("/merl/{entry_id}")
def update_merl_entry(
    entry_id: str, payload: MerlEntryPayload, db: DbClient = Depends(get_db_client)
):
    update_values(payload, MERL_REQUIRED, "merl_entries")
    if payload.workplan_id:
        require_parent(db, "work_plans", payload.workplan_id, "Workplan")
    return update_row(
        db, "merl_entries", entry_id, payload, "MERL entry", required=MERL_REQUIRED
    )


@router.delete("/merl/{entry_id}", response_model=DeleteResponse)
def delete_merl_entry(entry_id: str, db: DbClient = Depends(get_db_client)):
    if not db.delete("merl_entries", entry_id):
        raise not_found("MERL entry")
    return deleted("MERL entry")
