import unittest
from datetime import date
from unittest import mock

from fastapi.testclient import TestClient

from kssv.app import create_app
from kssv.db import InMemoryDbClient
from kssv.dependencies import get_db_client

CASES = "/api/case-management/cases"
ASSESSMENTS = "/api/case-management/assessments"
SERVICES = "/api/case-management/services"


class CaseManagementApiTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        app = create_app()
        app.dependency_overrides[get_db_client] = lambda: self.db
        self.client = TestClient(app)

    def _case(self, **overrides):
        body = {"name": "Survivor A", "case_status": "ACTIVE", "consent_status": True}
        body.update(overrides)
        response = self.client.post(CASES, json=body)
        self.assertEqual(response.status_code, 201)
        return response.json()

    def test_case_ids_are_generated_in_sequence(self):
        self.assertEqual(self._case()["case_id"], "KSSV001")
        self.assertEqual(self._case(case_id="KSSV009")["case_id"], "KSSV009")
        self.assertEqual(self._case()["case_id"], "KSSV010")

    def test_duplicate_case_id_is_rejected(self):
        self._case(case_id="KSSV001")
        response = self.client.post(
            CASES, json={"case_id": "KSSV001", "name": "B", "case_status": "ACTIVE"}
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("KSSV001", response.json()["error"])

    def test_case_requires_name_and_status(self):
        response = self.client.post(CASES, json={"contact_no": "0700000000"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json(), {"error": "Missing required fields: name, case_status"}
        )
        invalid = self.client.post(CASES, json={"name": "A", "case_status": "OPEN"})
        self.assertEqual(invalid.status_code, 400)

    def test_case_is_addressed_by_case_id(self):
        case = self._case(date_sharing_consent="2025-04-01")
        fetched = self.client.get(f"{CASES}/{case['case_id']}").json()
        self.assertEqual(fetched["id"], case["id"])
        self.assertEqual(fetched["date_sharing_consent"], "2025-04-01")

        updated = self.client.put(
            f"{CASES}/{case['case_id']}", json={"case_status": "CLOSED"}
        )
        self.assertEqual(updated.status_code, 200)
        self.assertEqual(updated.json()["case_status"], "CLOSED")

        renamed = self.client.put(f"{CASES}/{case['case_id']}", json={"case_id": "X"})
        self.assertEqual(renamed.status_code, 400)
        missing = self.client.get(f"{CASES}/KSSV999")
        self.assertEqual(missing.json(), {"error": "Case not found"})

    def test_case_list_filters_and_search(self):
        self._case(name="Akinyi")
        self._case(name="Mary", case_status="ON_HOLD")
        on_hold = self.client.get(CASES, params={"status": "ON_HOLD"}).json()
        self.assertEqual([c["name"] for c in on_hold], ["Mary"])
        found = self.client.get(CASES, params={"search": "kssv001"}).json()
        self.assertEqual([c["name"] for c in found], ["Akinyi"])
        everyone = self.client.get(CASES, params={"status": "all"}).json()
        self.assertEqual(len(everyone), 2)

    def test_missing_fields_reported_before_case_lookup(self):
        cases = [
            (CASES, {"case_status": "ACTIVE"}, "name"),
            (CASES, {"case_id": "KSSV009", "name": "A"}, "case_status"),
            (ASSESSMENTS, {"case_id": "KSSV404"}, "safety_risk_level"),
            (SERVICES, {"case_id": "KSSV404", "service_type": "Shelter"}, "service_date"),
        ]
        for path, body, field in cases:
            with self.subTest(path=path, body=body):
                with mock.patch.object(self.db, "get", wraps=self.db.get) as get:
                    with mock.patch.object(self.db, "list", wraps=self.db.list) as rows:
                        response = self.client.post(path, json=body)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(
                    response.json(), {"error": f"Missing required fields: {field}"}
                )
                get.assert_not_called()
                rows.assert_not_called()

    def test_assessment_requires_existing_case(self):
        response = self.client.post(
            ASSESSMENTS, json={"case_id": "KSSV404", "safety_risk_level": "LOW"}
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Case not found"})

    def test_assessments(self):
        case = self._case()
        created = self.client.post(
            ASSESSMENTS,
            json={
                "case_id": case["case_id"],
                "safety_risk_level": "HIGH",
                "service_needs": ["COUNSELING", "LEGAL"],
                "date_of_intake": "2025-05-02",
            },
        )
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.json()["service_needs"], ["COUNSELING", "LEGAL"])
        self.assertFalse(created.json()["case_closure"])

        high = self.client.get(ASSESSMENTS, params={"risk_level": "HIGH"}).json()
        self.assertEqual(len(high), 1)
        closed = self.client.put(
            f"{ASSESSMENTS}/{created.json()['id']}",
            json={"case_closure": True, "reason_for_closure": "Relocated"},
        )
        self.assertTrue(closed.json()["case_closure"])

        bad_need = self.client.post(
            ASSESSMENTS,
            json={
                "case_id": case["case_id"],
                "safety_risk_level": "LOW",
                "service_needs": ["TRANSPORT"],
            },
        )
        self.assertEqual(bad_need.status_code, 400)

    def test_services_ordered_by_date(self):
        case = self._case()
        for day in ("2025-01-05", "2025-03-05", "2025-02-05"):
            response = self.client.post(
                SERVICES,
                json={
                    "case_id": case["case_id"],
                    "service_type": "COUNSELING",
                    "service_date": day,
                },
            )
            self.assertEqual(response.status_code, 201)
            self.assertEqual(response.json()["status"], "SCHEDULED")
        services = self.client.get(SERVICES, params={"case_id": case["case_id"]}).json()
        self.assertEqual(
            [s["service_date"] for s in services],
            ["2025-03-05", "2025-02-05", "2025-01-05"],
        )
        missing = self.client.post(SERVICES, json={"case_id": case["case_id"]})
        self.assertEqual(
            missing.json(),
            {"error": "Missing required fields: service_type, service_date"},
        )

    def test_stats(self):
        first = self._case()
        self._case(case_status="ON_HOLD")
        self.client.post(
            ASSESSMENTS, json={"case_id": first["case_id"], "safety_risk_level": "CRITICAL"}
        )
        self.client.post(
            SERVICES,
            json={
                "case_id": first["case_id"],
                "service_type": "MEDICAL",
                "service_date": date.today().isoformat(),
            },
        )
        self.client.post(
            SERVICES,
            json={
                "case_id": first["case_id"],
                "service_type": "LEGAL_AID",
                "service_date": "2001-01-01",
            },
        )
        stats = self.client.get("/api/case-management/stats").json()
        self.assertEqual(
            stats,
            {
                "total_cases": 2,
                "active_cases": 1,
                "closed_cases": 0,
                "high_risk_cases": 1,
                "services_this_month": 1,
                "pending_assessments": 1,
            },
        )

    def test_delete_case_removes_children(self):
        case = self._case()
        self.client.post(
            ASSESSMENTS, json={"case_id": case["case_id"], "safety_risk_level": "LOW"}
        )
        self.client.post(
            SERVICES,
            json={
                "case_id": case["case_id"],
                "service_type": "SHELTER",
                "service_date": "2025-01-01",
            },
        )
        response = self.client.delete(f"{CASES}/{case['case_id']}")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["success"])
        self.assertEqual(self.client.get(ASSESSMENTS).json(), [])
        self.assertEqual(self.client.get(SERVICES).json(), [])
        self.assertEqual(self.client.delete(f"{CASES}/{case['case_id']}").status_code, 404)


if __name__ == "__main__":
    unittest.main()
