"""
CLI helper to import a workplan CSV into the configured database.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from kssv.db import InMemoryDbClient, PostgresDbClient
from kssv.dependencies import get_db_client
from kssv.routes.workplans import import_workplan_csv

logger = logging.getLogger("import_workplans")


def main() -> int:
    parser = argparse.ArgumentParser(description="Import workplans from a CSV file")
    parser.add_argument("csv_path", type=Path, help="Path to the workplan CSV")
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="SQLAlchemy URL to import into (defaults to DATABASE_URL)",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    db = PostgresDbClient(args.database_url) if args.database_url else get_db_client()
    if isinstance(db, InMemoryDbClient):
        logger.warning("No database configured; rows will not be persisted")

    try:
        imported, errors = import_workplan_csv(
            db, args.csv_path.read_text(encoding="utf-8-sig")
        )
    except ValueError as exc:
        logger.error("%s: %s", args.csv_path, exc)
        return 2

    for error in errors:
        logger.warning("line %d: %s", error["line"], error["error"])
    print(f"Imported {len(imported)} workplan(s), {len(errors)} row(s) rejected")
    return 0 if imported else 1


if __name__ == "__main__":
    sys.exit(main())
