"""
Helpers for reading and deleting the program → activity → task hierarchy.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Optional

from kssv.db import DbClient, ListQuery
from kssv.metrics import impact_metrics

logger = logging.getLogger(__name__)


def _group_by(rows: list[dict], key: str) -> dict[str, list[dict]]:
    grouped: dict[str, list[dict]] = defaultdict(list)
    for row in rows:
        grouped[row[key]].append(row)
    return grouped


def attach_tasks(db: DbClient, activities: list[dict]) -> list[dict]:
    if not activities:
        return activities
    tasks = db.list(
        "tasks",
        ListQuery(
            filters={"activity_id": [a["id"] for a in activities]},
            descending=False,
        ),
    )
    by_activity = _group_by(tasks, "activity_id")
    for activity in activities:
        activity["tasks"] = by_activity.get(activity["id"], [])
    return activities


def attach_activities(db: DbClient, programs: list[dict]) -> list[dict]:
    """Nest activities (with their tasks) and impact metrics into each program."""
    if not programs:
        return programs
    activities = db.list(
        "activities",
        ListQuery(
            filters={"program_id": [p["id"] for p in programs]},
            descending=False,
        ),
    )
    attach_tasks(db, activities)
    by_program = _group_by(activities, "program_id")
    for program in programs:
        program["activities"] = by_program.get(program["id"], [])
        program["impact_metrics"] = impact_metrics(program["activities"])
    return programs


def load_programs(db: DbClient, query: Optional[ListQuery] = None) -> list[dict]:
    return attach_activities(db, db.list("programs", query))


def load_program(db: DbClient, program_id: str) -> Optional[dict]:
    program = db.get("programs", program_id)
    if not program:
        return None
    return attach_activities(db, [program])[0]


def load_task(db: DbClient, task: dict) -> dict:
    """Nest the parent activity, and its program, into a task row."""
    activity = db.get("activities", task["activity_id"])
    if activity:
        activity["program"] = db.get("programs", activity["program_id"])
    task["activity"] = activity
    return task


def delete_task(db: DbClient, task_id: str) -> int:
    db.delete("task_evaluations", task_id, key="task_id")
    db.delete("risk_assessments", task_id, key="task_id")
    return db.delete("tasks", task_id)


def delete_activity(db: DbClient, activity_id: str) -> int:
    for task in db.list("tasks", ListQuery(filters={"activity_id": activity_id})):
        delete_task(db, task["id"])
    return db.delete("activities", activity_id)


def delete_program(db: DbClient, program_id: str) -> int:
    activities = db.list("activities", ListQuery(filters={"program_id": program_id}))
    for activity in activities:
        delete_activity(db, activity["id"])
    deleted = db.delete("programs", program_id)
    if deleted:
        logger.info(
            "Deleted program %s with %d activities", program_id, len(activities)
        )
    return deleted
