"""
Derived aggregates computed over rows already fetched from the database.

Nothing here touches the database; every function takes plain row dicts
and returns plain dicts so the routes and the export can share them.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

TASK_STATUS_COMPLETE = 10
HIGH_RISK_LEVELS = ("HIGH", "CRITICAL")


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives, matching the dashboard's rounding."""
    return int(math.floor(value + 0.5))


def percent(part: float, whole: float) -> int:
    if not whole:
        return 0
    return round_half_up(part / whole * 100)


def impact_metrics(activities: Optional[Sequence[dict]]) -> dict:
    """Roll a program's activities up into its impact metrics."""
    activities = activities or []
    total_progress = sum(a.get("progress") or 0 for a in activities)
    return {
        "beneficiaries_reached": total_progress,
        "activities_completed": sum(
            1 for a in activities if a.get("status") == "completed"
        ),
        "budget_utilized": sum(a.get("budget_utilized") or 0 for a in activities),
        "success_rate": (
            round_half_up(total_progress / len(activities)) if activities else 0
        ),
    }


def _as_date(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _program_tasks(programs: Iterable[dict]) -> list[dict]:
    return [
        task
        for program in programs
        for activity in program.get("activities") or []
        for task in activity.get("tasks") or []
    ]


def _utilized(programs: Iterable[dict]) -> float:
    return sum(
        activity.get("budget_utilized") or 0
        for program in programs
        for activity in program.get("activities") or []
    )


def task_performance(tasks: Sequence[dict], today: Optional[date] = None) -> dict:
    """
    Bucket tasks by their 0-10 status score.

    A status of 0 or None means not started and lands in no bucket.
    At-risk tasks are due within a week (or overdue) and score below 7.
    """
    today = today or date.today()
    on_track = behind = at_risk = completed = 0
    for task in tasks:
        status = task.get("status") or 0
        if 7 <= status < TASK_STATUS_COMPLETE:
            on_track += 1
        if 0 < status < 5:
            behind += 1
        if status == TASK_STATUS_COMPLETE:
            completed += 1
        due = _as_date(task.get("activity_timeline"))
        if due is not None and (due - today).days < 7 and 0 < status < 7:
            at_risk += 1
    return {
        "on_track": on_track,
        "behind": behind,
        "at_risk": at_risk,
        "completed": completed,
    }


def program_analytics(
    programs: Sequence[dict],
    focus_areas: Sequence[str],
    today: Optional[date] = None,
) -> dict:
    """Summarise programs carrying nested ``activities`` (each with ``tasks``)."""
    total_budget = sum(p.get("budget_total") or 0 for p in programs)
    utilized = _utilized(programs)

    focus_area_performance = []
    for area in focus_areas:
        area_programs = [p for p in programs if p.get("focus_area") == area]
        area_budget = sum(p.get("budget_total") or 0 for p in area_programs)
        area_utilized = _utilized(area_programs)
        area_tasks = _program_tasks(area_programs)
        done = sum(1 for t in area_tasks if t.get("status") == TASK_STATUS_COMPLETE)
        focus_area_performance.append(
            {
                "area": area,
                "completion_rate": percent(area_utilized, area_budget),
                "budget_utilization": percent(area_utilized, area_budget),
                "task_success": percent(done, len(area_tasks)),
            }
        )

    return {
        "overview": {
            "total_programs": len(programs),
            "overall_completion": percent(utilized, total_budget),
            "budget_utilization_rate": percent(utilized, total_budget),
            "total_beneficiaries": sum(
                impact_metrics(p.get("activities"))["beneficiaries_reached"]
                for p in programs
            ),
        },
        "task_performance": task_performance(_program_tasks(programs), today=today),
        "focus_area_performance": focus_area_performance,
    }


def case_stats(
    cases: Sequence[dict],
    assessments: Sequence[dict],
    services: Sequence[dict],
    today: Optional[date] = None,
) -> dict:
    today = today or date.today()
    assessed = {a.get("case_id") for a in assessments}

    def in_current_month(service: dict) -> bool:
        served = _as_date(service.get("service_date"))
        return served is not None and (served.year, served.month) == (
            today.year,
            today.month,
        )

    return {
        "total_cases": len(cases),
        "active_cases": sum(1 for c in cases if c.get("case_status") == "ACTIVE"),
        "closed_cases": sum(1 for c in cases if c.get("case_status") == "CLOSED"),
        "high_risk_cases": sum(
            1 for a in assessments if a.get("safety_risk_level") in HIGH_RISK_LEVELS
        ),
        "services_this_month": sum(1 for s in services if in_current_month(s)),
        "pending_assessments": sum(
            1 for c in cases if c.get("case_id") not in assessed
        ),
    }
