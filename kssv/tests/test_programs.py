import tempfile
import unittest
from datetime import date
from unittest import mock

from fastapi.testclient import TestClient

from kssv.app import create_app
from kssv.db import InMemoryDbClient, PostgresDbClient
from kssv.dependencies import get_db_client


class ProgramApiTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        app = create_app()
        app.dependency_overrides[get_db_client] = lambda: self.db
        self.client = TestClient(app)

    def _program(self, **overrides):
        body = {
            "name": "Safe Spaces",
            "year": 2025,
            "status": "active",
            "budget_total": 10000,
            "focus_area": "GBV Management",
        }
        body.update(overrides)
        response = self.client.post("/api/programs", json=body)
        self.assertEqual(response.status_code, 201)
        return response.json()

    def _activity(self, program_id, **overrides):
        body = {"program_id": program_id, "name": "Community dialogues"}
        body.update(overrides)
        response = self.client.post("/api/activities", json=body)
        self.assertEqual(response.status_code, 201)
        return response.json()

    def _task(self, activity_id, **overrides):
        body = {"activity_id": activity_id, "name": "Train facilitators"}
        body.update(overrides)
        response = self.client.post("/api/tasks", json=body)
        self.assertEqual(response.status_code, 201)
        return response.json()

    def test_new_program_has_empty_metrics(self):
        program = self._program()
        self.assertEqual(program["activities"], [])
        self.assertEqual(program["location"], "Migori County")
        self.assertTrue(program["public_visible"])
        self.assertEqual(
            program["impact_metrics"],
            {
                "beneficiaries_reached": 0,
                "activities_completed": 0,
                "budget_utilized": 0,
                "success_rate": 0,
            },
        )

    def test_program_requires_name_and_year(self):
        response = self.client.post("/api/programs", json={"description": "x"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Missing required fields: name, year"})

    def test_program_nests_activities_and_metrics(self):
        program = self._program()
        first = self._activity(
            program["id"], progress=50, budget_utilized=1000, status="completed"
        )
        self._activity(program["id"], progress=100, budget_utilized=2000)
        self._task(first["id"], status=10)

        fetched = self.client.get(f"/api/programs/{program['id']}").json()
        self.assertEqual(len(fetched["activities"]), 2)
        self.assertEqual(
            fetched["impact_metrics"],
            {
                "beneficiaries_reached": 150,
                "activities_completed": 1,
                "budget_utilized": 3000,
                "success_rate": 75,
            },
        )
        nested = {a["id"]: a for a in fetched["activities"]}
        self.assertEqual(len(nested[first["id"]]["tasks"]), 1)

        listed = self.client.get("/api/programs").json()
        self.assertEqual(listed[0]["impact_metrics"]["success_rate"], 75)

    def test_program_filters(self):
        self._program(name="A", year=2024, focus_area="SRH Rights")
        self._program(name="B", year=2025)
        by_year = self.client.get("/api/programs", params={"year": "2024"}).json()
        self.assertEqual([p["name"] for p in by_year], ["A"])
        everything = self.client.get(
            "/api/programs", params={"year": "all", "focus_area": "all"}
        ).json()
        self.assertEqual(len(everything), 2)
        bad = self.client.get("/api/programs", params={"year": "soon"})
        self.assertEqual(bad.status_code, 400)

    def test_activity_requires_existing_program(self):
        response = self.client.post(
            "/api/activities", json={"program_id": "missing", "name": "x"}
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Program not found"})

    def test_activity_list_by_program(self):
        one = self._program(name="One")
        two = self._program(name="Two")
        self._activity(one["id"])
        self._activity(two["id"])
        activities = self.client.get(
            "/api/activities", params={"programId": one["id"]}
        ).json()
        self.assertEqual([a["program_id"] for a in activities], [one["id"]])

    def test_task_nests_activity_and_program(self):
        program = self._program()
        activity = self._activity(program["id"])
        task = self._task(activity["id"], target=20, status="7")
        self.assertEqual(task["status"], 7)
        self.assertEqual(task["activity"]["id"], activity["id"])
        self.assertEqual(task["activity"]["program"]["id"], program["id"])

        listed = self.client.get("/api/tasks", params={"activityId": activity["id"]})
        self.assertEqual(listed.json()[0]["activity"]["program"]["name"], "Safe Spaces")

        out_of_range = self.client.post(
            "/api/tasks",
            json={"activity_id": activity["id"], "name": "x", "status": 11},
        )
        self.assertEqual(out_of_range.status_code, 400)

    def test_task_evaluations(self):
        program = self._program()
        task = self._task(self._activity(program["id"])["id"])

        first = self.client.post(
            f"/api/tasks/{task['id']}/evaluation",
            json={
                "evaluation_date": "2025-01-10T09:00:00",
                "progress_rating": 6,
                "quality_rating": 7,
            },
        )
        self.assertEqual(first.status_code, 201)
        self.assertEqual(first.json()["task_id"], task["id"])
        second = self.client.post(
            f"/api/tasks/{task['id']}/evaluation",
            json={"progress_rating": 8, "quality_rating": 9, "evaluator_name": "Amina"},
        )
        self.assertEqual(second.status_code, 201)

        evaluations = self.client.get(f"/api/tasks/{task['id']}/evaluation").json()
        self.assertEqual([e["progress_rating"] for e in evaluations], [8, 6])

        bad = self.client.post(
            f"/api/tasks/{task['id']}/evaluation",
            json={"progress_rating": 0, "quality_rating": 5},
        )
        self.assertEqual(bad.status_code, 400)
        unknown = self.client.get("/api/tasks/missing/evaluation")
        self.assertEqual(unknown.status_code, 404)
        self.assertEqual(unknown.json(), {"error": "Task not found"})

    def test_task_risks(self):
        program = self._program()
        task = self._task(self._activity(program["id"])["id"])
        created = self.client.post(
            "/api/risks",
            json={
                "task_id": task["id"],
                "risk_description": "Low turnout",
                "probability": "high",
            },
        )
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.json()["status"], "open")

        updated = self.client.put(
            f"/api/risks/{created.json()['id']}", json={"status": "mitigated"}
        )
        self.assertEqual(updated.json()["status"], "mitigated")
        risks = self.client.get(f"/api/tasks/{task['id']}/risks").json()
        self.assertEqual(len(risks), 1)

        orphan = self.client.post(
            "/api/risks", json={"task_id": "missing", "risk_description": "x"}
        )
        self.assertEqual(orphan.status_code, 400)
        self.assertEqual(orphan.json(), {"error": "Task not found"})

    def test_delete_program_cascades(self):
        program = self._program()
        activity = self._activity(program["id"])
        task = self._task(activity["id"])
        self.client.post(
            f"/api/tasks/{task['id']}/evaluation",
            json={"progress_rating": 5, "quality_rating": 5},
        )
        self.client.post(
            "/api/risks", json={"task_id": task["id"], "risk_description": "x"}
        )

        response = self.client.delete(f"/api/programs/{program['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(), {"success": True, "message": "Program deleted successfully"}
        )
        self.assertEqual(self.client.get(f"/api/activities/{activity['id']}").status_code, 404)
        self.assertEqual(self.client.get(f"/api/tasks/{task['id']}").status_code, 404)
        self.assertEqual(self.db.tables["task_evaluations"], {})
        self.assertEqual(self.db.tables["risk_assessments"], {})
        self.assertEqual(self.client.delete(f"/api/programs/{program['id']}").status_code, 404)

    def test_analytics(self):
        program = self._program()
        activity = self._activity(program["id"], progress=40, budget_utilized=2500)
        self._task(activity["id"], status=10)
        self._task(activity["id"], status=8)
        self._task(activity["id"], status=3, activity_timeline=date.today().isoformat())
        self._program(name="Other", focus_area="SRH Rights", budget_total=0)

        analytics = self.client.get("/api/analytics").json()
        self.assertEqual(
            analytics["overview"],
            {
                "total_programs": 2,
                "overall_completion": 25,
                "budget_utilization_rate": 25,
                "total_beneficiaries": 40,
            },
        )
        self.assertEqual(
            analytics["task_performance"],
            {"on_track": 1, "behind": 1, "at_risk": 1, "completed": 1},
        )
        areas = {a["area"]: a for a in analytics["focus_area_performance"]}
        self.assertEqual(len(areas), 4)
        self.assertEqual(areas["GBV Management"]["task_success"], 33)
        self.assertEqual(areas["SRH Rights"]["budget_utilization"], 0)

        filtered = self.client.get(
            "/api/analytics", params={"focusArea": "SRH Rights", "programId": "all"}
        ).json()
        self.assertEqual(filtered["overview"]["total_programs"], 1)

    def test_export_csv(self):
        program = self._program()
        activity = self._activity(program["id"])
        task = self._task(activity["id"])
        self.client.post(
            f"/api/tasks/{task['id']}/evaluation",
            json={"progress_rating": 5, "quality_rating": 6},
        )

        response = self.client.post(
            "/api/export",
            json={
                "includeProgramDetails": True,
                "includeTasks": True,
                "includeMEData": True,
                "format": "csv",
                "scope": "current",
                "programId": program["id"],
            },
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["message"], "Export generated successfully")
        self.assertEqual(
            sorted(body["files"]), ["evaluations.csv", "programs.csv", "tasks.csv"]
        )
        programs_csv = body["files"]["programs.csv"]
        self.assertTrue(programs_csv.startswith('"Program ID","Program Name"'))
        self.assertIn('"Safe Spaces"', programs_csv)

    def test_export_date_range(self):
        self._program()
        body = {"includeProgramDetails": True, "scope": "dateRange"}
        inside = self.client.post(
            "/api/export",
            json={**body, "startDate": "2000-01-01", "endDate": "2999-12-31"},
        ).json()
        self.assertIn("programs.csv", inside["files"])
        outside = self.client.post(
            "/api/export",
            json={**body, "startDate": "2000-01-01", "endDate": "2000-12-31"},
        ).json()
        self.assertEqual(outside["files"], {})
        missing = self.client.post("/api/export", json=body)
        self.assertEqual(missing.status_code, 400)

    def test_export_other_formats_not_implemented(self):
        self._program()
        response = self.client.post(
            "/api/export", json={"includeProgramDetails": True, "format": "pdf"}
        )
        self.assertEqual(response.status_code, 501)
        body = response.json()
        self.assertEqual(body["available_formats"], ["csv"])
        self.assertEqual(body["generated_files"], ["programs.csv"])

    def test_missing_fields_reported_before_parent_lookup(self):
        cases = [
            ("/api/activities", {"program_id": "missing"}, "name"),
            ("/api/tasks", {"activity_id": "missing"}, "name"),
            ("/api/risks", {"task_id": "missing"}, "risk_description"),
            ("/api/tasks/missing/evaluation", {"quality_rating": 5}, "progress_rating"),
        ]
        for path, body, field in cases:
            with self.subTest(path=path):
                with mock.patch.object(self.db, "get", wraps=self.db.get) as get:
                    response = self.client.post(path, json=body)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(
                    response.json(), {"error": f"Missing required fields: {field}"}
                )
                get.assert_not_called()

    def test_update_checks_body_before_parent_lookup(self):
        activity = self._activity(self._program()["id"])
        response = self.client.put(
            f"/api/activities/{activity['id']}",
            json={"program_id": "missing", "name": ""},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Missing required fields: name"})


class NotNullUpdateBehaviour:
    """Clearing a NOT NULL column is rejected the same way by both clients."""

    def make_client(self):
        raise NotImplementedError

    def setUp(self):
        self.db = self.make_client()
        app = create_app()
        app.dependency_overrides[get_db_client] = lambda: self.db
        self.client = TestClient(app)
        response = self.client.post(
            "/api/programs",
            json={"name": "Safe Spaces", "year": 2025, "budget_total": 5000},
        )
        self.assertEqual(response.status_code, 201)
        self.program = response.json()

    def test_null_and_blank_values_are_rejected(self):
        response = self.client.put(
            f"/api/programs/{self.program['id']}",
            json={"budget_total": None, "status": ""},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json(),
            {
                "error": "Invalid request: budget_total: may not be empty; "
                "status: may not be empty"
            },
        )
        stored = self.client.get(f"/api/programs/{self.program['id']}").json()
        self.assertEqual(stored["budget_total"], 5000)
        self.assertEqual(stored["status"], "planned")

    def test_boolean_flag_cannot_be_cleared(self):
        response = self.client.put(
            f"/api/programs/{self.program['id']}", json={"public_visible": None}
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json(), {"error": "Invalid request: public_visible: may not be empty"}
        )

    def test_nullable_columns_can_be_cleared(self):
        self.client.put(
            f"/api/programs/{self.program['id']}", json={"description": "Shelter"}
        )
        response = self.client.put(
            f"/api/programs/{self.program['id']}", json={"description": None}
        )
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()["description"])


class InMemoryNotNullUpdateTests(NotNullUpdateBehaviour, unittest.TestCase):
    def make_client(self):
        return InMemoryDbClient()


class SqlNotNullUpdateTests(NotNullUpdateBehaviour, unittest.TestCase):
    def make_client(self):
        # a file database is shared with the threads TestClient runs routes on
        workdir = tempfile.TemporaryDirectory()
        self.addCleanup(workdir.cleanup)
        client = PostgresDbClient(f"sqlite+pysqlite:///{workdir.name}/kssv.db")
        self.addCleanup(client.engine.dispose)
        return client


if __name__ == "__main__":
    unittest.main()
