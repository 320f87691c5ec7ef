"""
CLI helper to export program data as CSV files on disk.
"""

from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from kssv.db import PostgresDbClient
from kssv.dependencies import get_db_client
from kssv.routes.programs import collect_export_files
from kssv.schemas import ExportRequest

SECTIONS = ("program_details", "activities", "tasks", "me_data", "analytics")


def main() -> int:
    parser = argparse.ArgumentParser(description="Export programs to CSV")
    parser.add_argument(
        "-o",
        "--out",
        type=Path,
        default=Path("export"),
        help="Directory to write the CSV files into",
    )
    parser.add_argument(
        "--program-id",
        type=str,
        default=None,
        help="Export a single program",
    )
    parser.add_argument(
        "--start",
        type=date.fromisoformat,
        default=None,
        help="Only programs created on or after this date (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--end",
        type=date.fromisoformat,
        default=None,
        help="Only programs created on or before this date (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--only",
        nargs="+",
        choices=SECTIONS,
        default=list(SECTIONS),
        help="Sections to include (default: all)",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="SQLAlchemy URL to export from (defaults to DATABASE_URL)",
    )
    args = parser.parse_args()

    if args.program_id:
        scope = "current"
    elif args.start or args.end:
        if not (args.start and args.end):
            parser.error("--start and --end must be given together")
        scope = "dateRange"
    else:
        scope = "all"

    request = ExportRequest(
        scope=scope,
        program_id=args.program_id,
        start_date=args.start,
        end_date=args.end,
        **{f"include_{section}": section in args.only for section in SECTIONS},
    )
    db = PostgresDbClient(args.database_url) if args.database_url else get_db_client()
    files = collect_export_files(db, request)

    args.out.mkdir(parents=True, exist_ok=True)
    for name, text in files.items():
        (args.out / name).write_text(text, encoding="utf-8")
        print(f"Wrote {args.out / name}")
    return 0 if files else 1


if __name__ == "__main__":
    sys.exit(main())
