"""
Row-level helpers shared by the route modules.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from fastapi import HTTPException

from kssv.db import DbClient, not_null_columns
from kssv.errors import is_blank, not_found, require_fields
from kssv.schemas import Payload

logger = logging.getLogger(__name__)

ALL = "all"


def clean_filters(**values: Any) -> dict:
    """Drop filters that are unset or set to ``all``."""
    return {
        column: value
        for column, value in values.items()
        if value is not None and value != "" and value != ALL
    }


def get_or_404(db: DbClient, table: str, value: Any, entity: str, key: str = "id") -> dict:
    row = db.get(table, value, key=key)
    if not row:
        raise not_found(entity)
    return row


def require_parent(
    db: DbClient, table: str, value: Any, entity: str, key: str = "id"
) -> dict:
    parent = db.get(table, value, key=key)
    if not parent:
        raise HTTPException(status_code=400, detail=f"{entity} not found")
    return parent


def create_row(
    db: DbClient,
    table: str,
    payload: Payload,
    required: Iterable[str] = (),
    defaults: Optional[dict] = None,
    overrides: Optional[dict] = None,
) -> dict:
    require_fields(payload, required)
    values = dict(defaults or {})
    values.update(payload.create_values())
    values.update(overrides or {})
    row = db.insert(table, values)
    logger.info("Created %s row %s", table, row["id"])
    return row


def update_values(
    payload: Payload, required: Iterable[str] = (), table: Optional[str] = None
) -> dict:
    """Fields present in an update body; required fields may not be blanked."""
    values = payload.update_values()
    if not values:
        raise HTTPException(status_code=400, detail="No data provided for update")
    cleared = [name for name in required if name in values and is_blank(values[name])]
    if cleared:
        raise HTTPException(
            status_code=400, detail=f"Missing required fields: {', '.join(cleared)}"
        )
    if table:
        nulled = sorted(
            name
            for name in not_null_columns(table)
            if name in values and values[name] is None
        )
        if nulled:
            details = "; ".join(f"{name}: may not be empty" for name in nulled)
            raise HTTPException(status_code=400, detail=f"Invalid request: {details}")
    return values


def update_row(
    db: DbClient,
    table: str,
    value: Any,
    payload: Payload,
    entity: str,
    required: Iterable[str] = (),
    key: str = "id",
) -> dict:
    values = update_values(payload, required, table)
    row = db.update(table, value, values, key=key)
    if not row:
        raise not_found(entity)
    logger.info("Updated %s row %s", table, row["id"])
    return row


def deleted(entity: str) -> dict:
    return {"success": True, "message": f"{entity} deleted successfully"}


def delete_row(
    db: DbClient, table: str, value: Any, entity: str, key: str = "id"
) -> dict:
    if not db.delete(table, value, key=key):
        raise not_found(entity)
    logger.info("Deleted %s row %s", table, value)
    return deleted(entity)
