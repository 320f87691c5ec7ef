import unittest
from datetime import date, datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError

from kssv.db import InMemoryDbClient, ListQuery, PostgresDbClient


class DbClientBehaviour:
    """Checks shared by both DbClient implementations."""

    def make_client(self):
        raise NotImplementedError

    def setUp(self):
        self.db = self.make_client()

    def test_insert_fills_defaults_and_timestamps(self):
        row = self.db.insert("programs", {"name": "Safe Spaces", "year": 2025})
        self.assertTrue(row["id"])
        self.assertEqual(row["status"], "planned")
        self.assertTrue(row["public_visible"])
        self.assertEqual(row["budget_total"], 0)
        self.assertIsNotNone(row["created_at"])
        self.assertEqual(self.db.get("programs", row["id"])["name"], "Safe Spaces")

    def test_get_by_other_key(self):
        self.db.insert(
            "case_registers",
            {"case_id": "KSSV001", "case_status": "ACTIVE", "name": "A"},
        )
        row = self.db.get("case_registers", "KSSV001", key="case_id")
        self.assertEqual(row["name"], "A")
        self.assertIsNone(self.db.get("case_registers", "KSSV002", key="case_id"))

    def test_list_filters_search_and_paging(self):
        for name, year in [("Alpha", 2024), ("Beta", 2025), ("Gamma", 2025)]:
            self.db.insert("programs", {"name": name, "year": year, "location": "Migori"})

        by_year = self.db.list(
            "programs", ListQuery(filters={"year": 2025}, order_by="name", descending=False)
        )
        self.assertEqual([r["name"] for r in by_year], ["Beta", "Gamma"])

        many = self.db.list(
            "programs",
            ListQuery(filters={"name": ["Alpha", "Gamma"]}, order_by="name"),
        )
        self.assertEqual([r["name"] for r in many], ["Gamma", "Alpha"])

        searched = ListQuery(search="ALP", search_columns=("name", "location"))
        self.assertEqual([r["name"] for r in self.db.list("programs", searched)], ["Alpha"])
        self.assertEqual(self.db.count("programs", searched), 1)

        paged = self.db.list(
            "programs", ListQuery(order_by="name", descending=False, limit=2, offset=1)
        )
        self.assertEqual([r["name"] for r in paged], ["Beta", "Gamma"])
        self.assertEqual(self.db.count("programs"), 3)

    def test_search_matches_wildcards_literally(self):
        for name in ("100% Safe", "Safe_Spaces", "SafeXSpaces"):
            self.db.insert("programs", {"name": name, "year": 2025})

        def names(search):
            query = ListQuery(search=search, search_columns=("name",), order_by="name")
            return [r["name"] for r in self.db.list("programs", query)]

        self.assertEqual(names("%"), ["100% Safe"])
        self.assertEqual(names("e_s"), ["Safe_Spaces"])
        self.assertEqual(names("safe"), ["Safe_Spaces", "SafeXSpaces", "100% Safe"])

    def test_nulls_sort_last(self):
        self.db.insert("blog", {"title": "Undated", "content": "x"})
        self.db.insert("blog", {"title": "Old", "content": "x", "date": date(2024, 1, 1)})
        self.db.insert("blog", {"title": "New", "content": "x", "date": date(2025, 1, 1)})
        rows = self.db.list("blog", ListQuery(order_by="date"))
        self.assertEqual([r["title"] for r in rows], ["New", "Old", "Undated"])

    def test_ranges(self):
        self.db.insert("programs", {"name": "Now", "year": 2025})
        now = datetime.now(timezone.utc)
        inside = ListQuery(ranges={"created_at": (now - timedelta(days=1), None)})
        outside = ListQuery(ranges={"created_at": (None, now - timedelta(days=1))})
        self.assertEqual(len(self.db.list("programs", inside)), 1)
        self.assertEqual(self.db.list("programs", outside), [])

    def test_update_and_delete(self):
        row = self.db.insert("programs", {"name": "Old name", "year": 2025})
        updated = self.db.update("programs", row["id"], {"name": "New name"})
        self.assertEqual(updated["name"], "New name")
        self.assertEqual(updated["year"], 2025)
        self.assertIsNone(self.db.update("programs", "missing", {"name": "x"}))

        self.assertEqual(self.db.delete("programs", row["id"]), 1)
        self.assertEqual(self.db.delete("programs", row["id"]), 0)
        self.assertIsNone(self.db.get("programs", row["id"]))

    def test_delete_by_key_removes_every_match(self):
        case = {"case_id": "KSSV001", "case_status": "ACTIVE", "name": "A"}
        self.db.insert("case_registers", case)
        for level in ("LOW", "HIGH"):
            self.db.insert(
                "case_assessments", {"case_id": "KSSV001", "safety_risk_level": level}
            )
        self.assertEqual(self.db.delete("case_assessments", "KSSV001", key="case_id"), 2)
        self.assertEqual(self.db.list("case_assessments"), [])

    def test_increment(self):
        row = self.db.insert("projects", {"title": "Shelter", "description": "x"})
        self.db.increment("projects", row["id"])
        self.db.increment("projects", row["id"], amount=2)
        self.assertEqual(self.db.get("projects", row["id"])["views"], 3)

    def test_json_columns(self):
        row = self.db.insert(
            "blog", {"title": "Tags", "content": "x", "tags": ["gbv", "srh"]}
        )
        self.assertEqual(self.db.get("blog", row["id"])["tags"], ["gbv", "srh"])

    def test_unknown_table_and_column(self):
        with self.assertRaises(ValueError):
            self.db.insert("nope", {})
        with self.assertRaises(ValueError):
            self.db.insert("programs", {"name": "x", "year": 2025, "colour": "red"})


class InMemoryDbClientTests(DbClientBehaviour, unittest.TestCase):
    def make_client(self):
        return InMemoryDbClient()

    def test_reset(self):
        self.db.insert("programs", {"name": "x", "year": 2025})
        self.db.reset()
        self.assertEqual(self.db.count("programs"), 0)


class PostgresDbClientTests(DbClientBehaviour, unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the Postgres client logic.
    """

    def make_client(self):
        return PostgresDbClient("sqlite+pysqlite:///:memory:")

    def test_duplicate_case_id_raises_integrity_error(self):
        case = {"case_id": "KSSV001", "case_status": "ACTIVE", "name": "A"}
        self.db.insert("case_registers", case)
        with self.assertRaises(IntegrityError):
            self.db.insert("case_registers", case)

    def test_missing_required_column_raises_integrity_error(self):
        with self.assertRaises(IntegrityError):
            self.db.insert("programs", {"year": 2025})


if __name__ == "__main__":
    unittest.main()
