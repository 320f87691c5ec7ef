"""
Admin directory records. Login and user invitations live with the auth provider.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from kssv.db import DbClient
from kssv.dependencies import get_db_client
from kssv.errors import require_fields
from kssv.routes.common import (
    create_row,
    delete_row,
    get_or_404,
    update_row,
    update_values,
)
from kssv.schemas import AdminPayload, DeleteResponse

router = APIRouter()

ADMIN_REQUIRED = ("name", "email")


def _check_email_free(db: DbClient, email: str, admin_id: str | None = None) -> None:
    existing = db.get("admins", email, key="email")
    if existing and existing["id"] != admin_id:
        raise HTTPException(
            status_code=400, detail="An admin with this email already exists"
        )


@router.get("/admins")
def list_admins(db: DbClient = Depends(get_db_client)):
    return db.list("admins")


@router.post("/admins", status_code=201)
def create_admin(payload: AdminPayload, db: DbClient = Depends(get_db_client)):
    require_fields(payload, ADMIN_REQUIRED)
    _check_email_free(db, payload.email)
    return create_row(db, "admins", payload, required=ADMIN_REQUIRED)


@router.get("/admins/{admin_id}")
def get_admin(admin_id: str, db: DbClient = Depends(get_db_client)):
    return get_or_404(db, "admins", admin_id, "Admin")


@router.put("/admins/{admin_id}")
def update_admin(
    admin_id: str, payload: AdminPayload, db: DbClient = Depends(get_db_client)
):
    update_values(payload, ADMIN_REQUIRED, "admins")
    if payload.email:
        _check_email_free(db, payload.email, admin_id)
    return update_row(
        db, "admins", admin_id, payload, "Admin", required=ADMIN_REQUIRED
    )


@router.delete("/admins/{admin_id}", response_model=DeleteResponse)
def delete_admin(admin_id: str, db: DbClient = Depends(get_db_client)):
    return delete_row(db, "admins", admin_id, "Admin")
