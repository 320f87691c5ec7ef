"""
Public intake forms: contact messages, volunteers, members, partners and donations.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from kssv.db import DbClient, ListQuery
from kssv.dependencies import get_db_client
from kssv.routes.common import (
    clean_filters,
    create_row,
    delete_row,
    get_or_404,
    update_row,
)
from kssv.schemas import (
    DeleteResponse,
    DonationPayload,
    MemberPayload,
    MessageCreatedResponse,
    MessagePayload,
    PartnerPayload,
    VolunteerPayload,
)

router = APIRouter()

PENDING = {"status": "pending"}


# Messages


@router.get("/messages")
def list_messages(
    replied: Optional[bool] = None, db: DbClient = Depends(get_db_client)
):
    return db.list("messages", ListQuery(filters=clean_filters(replied=replied)))


@router.post("/messages", response_model=MessageCreatedResponse, status_code=201)
def create_message(payload: MessagePayload, db: DbClient = Depends(get_db_client)):
    row = create_row(
        db,
        "messages",
        payload,
        required=("first_name", "last_name", "email", "message"),
        overrides={"replied": False, "reply_text": None},
    )
    return MessageCreatedResponse(message="Message saved successfully", data=row)


@router.get("/messages/{message_id}")
def get_message(message_id: str, db: DbClient = Depends(get_db_client)):
    return get_or_404(db, "messages", message_id, "Message")


@router.put("/messages/{message_id}")
def update_message(
    message_id: str, payload: MessagePayload, db: DbClient = Depends(get_db_client)
):
    return update_row(
        db,
        "messages",
        message_id,
        payload,
        "Message",
        required=("first_name", "last_name", "email", "message"),
    )


@router.delete("/messages/{message_id}", response_model=DeleteResponse)
def delete_message(message_id: str, db: DbClient = Depends(get_db_client)):
    return delete_row(db, "messages", message_id, "Message")


# Volunteers


@router.get("/volunteers")
def list_volunteers(
    status: Optional[str] = None, db: DbClient = Depends(get_db_client)
):
    return db.list("volunteers", ListQuery(filters=clean_filters(status=status)))


@router.post("/volunteers", status_code=201)
def create_volunteer(payload: VolunteerPayload, db: DbClient = Depends(get_db_client)):
    return create_row(
        db, "volunteers", payload, required=("name", "email"), overrides=PENDING
    )


@router.get("/volunteers/{volunteer_id}")
def get_volunteer(volunteer_id: str, db: DbClient = Depends(get_db_client)):
    return get_or_404(db, "volunteers", volunteer_id, "Volunteer")


@router.put("/volunteers/{volunteer_id}")
def update_volunteer(
    volunteer_id: str,
    payload: VolunteerPayload,
    db: DbClient = Depends(get_db_client),
):
    return update_row(
        db, "volunteers", volunteer_id, payload, "Volunteer", required=("name", "email")
    )


@router.delete("/volunteers/{volunteer_id}", response_model=DeleteResponse)
def delete_volunteer(volunteer_id: str, db: DbClient = Depends(get_db_client)):
    return delete_row(db, "volunteers", volunteer_id, "Volunteer")


# Members


@router.get("/members")
def list_members(status: Optional[str] = None, db: DbClient = Depends(get_db_client)):
    return db.list("members", ListQuery(filters=clean_filters(status=status)))


@router.post("/members", status_code=201)
def create_member(payload: MemberPayload, db: DbClient = Depends(get_db_client)):
    return create_row(
        db, "members", payload, required=("name", "email"), overrides=PENDING
    )


@router.get("/members/{member_id}")
def get_member(member_id: str, db: DbClient = Depends(get_db_client)):
    return get_or_404(db, "members", member_id, "Member")


@router.put("/members/{member_id}")
def update_member(
    member_id: str, payload: MemberPayload, db: DbClient = Depends(get_db_client)
):
    return update_row(
        db, "members", member_id, payload, "Member", required=("name", "email")
    )


@router.delete("/members/{member_id}", response_model=DeleteResponse)
def delete_member(member_id: str, db: DbClient = Depends(get_db_client)):
    return delete_row(db, "members", member_id, "Member")


# Partners

PARTNER_REQUIRED = ("organization_name", "contact_person", "email")


@router.get("/partners")
def list_partners(status: Optional[str] = None, db: DbClient = Depends(get_db_client)):
    return db.list("partners", ListQuery(filters=clean_filters(status=status)))


@router.post("/partners", status_code=201)
def create_partner(payload: PartnerPayload, db: DbClient = Depends(get_db_client)):
    return create_row(
        db, "partners", payload, required=PARTNER_REQUIRED, overrides=PENDING
    )


@router.get("/partners/{partner_id}")
def get_partner(partner_id: str, db: DbClient = Depends(get_db_client)):
    return get_or_404(db, "partners", partner_id, "Partner")


@router.put("/partners/{partner_id}")
def update_partner(
    partner_id: str, payload: PartnerPayload, db: DbClient = Depends(get_db_client)
):
    return update_row(
        db, "partners", partner_id, payload, "Partner", required=PARTNER_REQUIRED
    )


@router.delete("/partners/{partner_id}", response_model=DeleteResponse)
def delete_partner(partner_id: str, db: DbClient = Depends(get_db_client)):
    return delete_row(db, "partners", partner_id, "Partner")


# Donations


@router.get("/donations")
def list_donations(
    method: Optional[str] = None, db: DbClient = Depends(get_db_client)
):
    return db.list(
        "donations", ListQuery(filters=clean_filters(method=method), order_by="date")
    )


@router.post("/donations", status_code=201)
def create_donation(payload: DonationPayload, db: DbClient = Depends(get_db_client)):
    return create_row(db, "donations", payload, required=("donor_name", "amount"))
