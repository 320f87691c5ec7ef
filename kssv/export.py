"""
CSV export of program data and CSV import of workplans.
"""

from __future__ import annotations

import csv
import io
from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence

from kssv.metrics import program_analytics

PROGRAM_COLUMNS = [
    ("Program ID", "id"),
    ("Program Name", "name"),
    ("Description", "description"),
    ("Focus Area", "focus_area"),
    ("Year", "year"),
    ("Status", "status"),
    ("Budget Total", "budget_total"),
    ("Location", "location"),
    ("Strategic Objective", "strategic_objective"),
    ("Public Visible", "public_visible"),
    ("Created At", "created_at"),
]

ACTIVITY_COLUMNS = [
    ("Activity ID", "id"),
    ("Program ID", "program_id"),
    ("Activity Name", "name"),
    ("Description", "description"),
    ("Outcome", "outcome"),
    ("KPI", "kpi"),
    ("Start Date", "timeline_start"),
    ("End Date", "timeline_end"),
    ("Budget Allocated", "budget_allocated"),
    ("Budget Utilized", "budget_utilized"),
    ("Status", "status"),
    ("Progress", "progress"),
    ("Responsible Person", "responsible_person"),
    ("Challenges", "challenges"),
    ("Next Steps", "next_steps"),
]

TASK_COLUMNS = [
    ("Task ID", "id"),
    ("Activity ID", "activity_id"),
    ("Task Name", "name"),
    ("Target", "target"),
    ("Task Timeline", "task_timeline"),
    ("Activity Timeline", "activity_timeline"),
    ("Budget", "budget"),
    ("Output", "output"),
    ("Outcome", "outcome"),
    ("Evaluation Criteria", "evaluation_criteria"),
    ("Risks", "risks"),
    ("Mitigation Measures", "mitigation_measures"),
    ("Resource Person", "resource_person"),
    ("Status", "status"),
    ("Learning & Development", "learning_and_development"),
    ("Self Evaluation", "self_evaluation"),
    ("Notes", "notes"),
]

EVALUATION_COLUMNS = [
    ("Evaluation ID", "id"),
    ("Task ID", "task_id"),
    ("Evaluation Date", "evaluation_date"),
    ("Progress Rating", "progress_rating"),
    ("Quality Rating", "quality_rating"),
    ("Challenges Encountered", "challenges_encountered"),
    ("Success Factors", "success_factors"),
    ("Adjustments Made", "adjustments_made"),
    ("Lessons Learned", "lessons_learned"),
    ("Recommendations", "recommendations"),
    ("Evaluator", "evaluator_name"),
    ("Next Evaluation Date", "next_evaluation_date"),
]

RISK_COLUMNS = [
    ("Risk ID", "id"),
    ("Task ID", "task_id"),
    ("Risk Description", "risk_description"),
    ("Probability", "probability"),
    ("Impact", "impact"),
    ("Mitigation Strategy", "mitigation_strategy"),
    ("Status", "status"),
    ("Assigned To", "assigned_to"),
]

WORKPLAN_REQUIRED_COLUMNS = (
    "focus_area",
    "activity_name",
    "timeline_text",
    "tasks_description",
)

SUPPORTED_FORMATS = ["csv"]


def format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ", ".join(format_value(v) for v in value)
    return str(value)


def to_csv(rows: Sequence[dict]) -> str:
    """Render rows sharing the first row's keys, quoting every field."""
    if not rows:
        return ""
    headers = list(rows[0].keys())
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([format_value(row.get(header)) for header in headers])
    return buffer.getvalue()


def _labelled(rows: Iterable[dict], columns: Sequence[tuple[str, str]]) -> list[dict]:
    return [{label: row.get(key) for label, key in columns} for row in rows]


def build_program_sheets(
    programs: Sequence[dict],
    *,
    include_program_details: bool = False,
    include_activities: bool = False,
    include_tasks: bool = False,
    include_me_data: bool = False,
    include_analytics: bool = False,
    evaluations: Sequence[dict] = (),
    risks: Sequence[dict] = (),
    focus_areas: Sequence[str] = (),
    today: Optional[date] = None,
) -> dict[str, list[dict]]:
    """Build the labelled export sheets for programs with nested activities/tasks."""
    activities = [a for p in programs for a in p.get("activities") or []]
    tasks = [t for a in activities for t in a.get("tasks") or []]
    sheets: dict[str, list[dict]] = {}

    if include_program_details:
        sheets["programs"] = _labelled(programs, PROGRAM_COLUMNS)
    if include_activities:
        sheets["activities"] = _labelled(activities, ACTIVITY_COLUMNS)
    if include_tasks:
        sheets["tasks"] = _labelled(tasks, TASK_COLUMNS)
    if include_me_data:
        sheets["evaluations"] = _labelled(evaluations, EVALUATION_COLUMNS)
        sheets["risks"] = _labelled(risks, RISK_COLUMNS)
    if include_analytics:
        analytics = program_analytics(programs, focus_areas, today=today)
        sheets["analytics"] = [analytics["overview"]]
        sheets["performance"] = [analytics["task_performance"]]
        sheets["focus_areas"] = analytics["focus_area_performance"]
    return sheets


def render_csv_files(sheets: dict[str, list[dict]]) -> dict[str, str]:
    return {f"{name}.csv": to_csv(rows) for name, rows in sheets.items() if rows}


def parse_workplan_csv(text: str) -> list[tuple[int, dict]]:
    """
    Parse CSV text into ``(line_number, row)`` pairs.

    Header names are normalised to snake_case; blank lines are skipped.
    Raises ValueError when a required column is missing from the header.
    """
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    if reader.fieldnames is None:
        raise ValueError("CSV file is empty")
    reader.fieldnames = [
        (name or "").strip().lower().replace(" ", "_") for name in reader.fieldnames
    ]
    missing = [c for c in WORKPLAN_REQUIRED_COLUMNS if c not in reader.fieldnames]
    if missing:
        raise ValueError(f"Missing required columns: {', '.join(missing)}")

    rows = []
    for row in reader:
        values = {
            key: value.strip()
            for key, value in row.items()
            if key and isinstance(value, str) and value.strip()
        }
        if values:
            rows.append((reader.line_num, values))
    return rows
