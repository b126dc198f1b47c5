import json
import unittest

import httpx
from fastapi.testclient import TestClient

from app.core.errors import ProviderError
from app.core.rate_limit import limiter
from app.main import app
from app.services.session_registry import SessionRegistry
from app.storage.local_store import LocalStorage
from fakes import FakeProvider

SUPABASE_URL = "https://project.supabase.co"


class AnalysisApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        limiter.enabled = False
        cls.client = TestClient(app)

    def setUp(self):
        self.provider = FakeProvider()
        self.storage = LocalStorage(":memory:")
        self.registry = SessionRegistry(provider=self.provider, local_storage=self.storage)
        app.state.sessions = self.registry
        self.session_id = "session-abcdef123"
        self.jd_text = "Senior Go Engineer with Kubernetes experience."
        self.resume_text = "Jane Doe\nSix years of Go, led a Kubernetes migration."

    def tearDown(self):
        app.state.sessions = None
        self.storage.close()

    def _analyze(self, **overrides):
        body = {
            "session_id": self.session_id,
            "job_description": self.jd_text,
            "resume_text": self.resume_text,
            "file_name": "jane.pdf",
        }
        body.update(overrides)
        return self.client.post("/v1/analysis", json=body)

    def test_health(self):
        response = self.client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "healthy", "remote_store": False})

    def test_analysis_returns_camel_case_record(self):
        response = self._analyze(weights={"skills": 60, "experience": 30, "education": 10})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["candidateName"], "Jane Doe")
        self.assertEqual(body["overallScore"], 84)
        self.assertEqual(body["skillsAnalysis"]["score"], 90)
        self.assertEqual(body["fileName"], "jane.pdf")
        self.assertTrue(body["id"].startswith("analysis-"))
        self.assertTrue(body["timestamp"].endswith("Z"))
        self.assertEqual(self.provider.calls[0][2].skills, 60)

    def test_empty_resume_is_rejected(self):
        response = self._analyze(resume_text="   ")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["code"], "missing_input")
        self.assertEqual(self.provider.calls, [])

    def test_invalid_provider_output_maps_to_bad_gateway(self):
        self.provider.response = "Sorry, I can't do that."
        response = self._analyze()
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()["detail"]["code"], "unparseable_payload")

    def test_provider_failure_maps_to_service_unavailable(self):
        self.provider.error = ProviderError("upstream timeout")
        response = self._analyze()
        self.assertEqual(response.status_code, 503)
        detail = response.json()["detail"]
        self.assertEqual(detail["code"], "provider_unavailable")
        self.assertNotIn("upstream timeout", detail["detail"])

    def test_short_session_id_rejected(self):
        response = self._analyze(session_id="abc")
        self.assertEqual(response.status_code, 422)

    def test_history_flow(self):
        first = self._analyze().json()
        second = self._analyze(resume_text="John Roe\nPython developer.").json()

        history = self.client.get("/v1/history", params={"session_id": self.session_id}).json()
        self.assertEqual(history["identity"], "anonymous")
        self.assertFalse(history["authenticated"])
        self.assertEqual(history["current_id"], second["id"])
        self.assertEqual([item["id"] for item in history["items"]], [second["id"], first["id"]])

        selected = self.client.post(
            f"/v1/history/{first['id']}/select", json={"session_id": self.session_id}
        ).json()
        self.assertEqual(selected["current_id"], first["id"])

        unknown = self.client.post("/v1/history/missing/select", json={"session_id": self.session_id})
        self.assertEqual(unknown.status_code, 200)
        self.assertEqual(unknown.json()["current_id"], first["id"])

        deleted = self.client.delete(f"/v1/history/{first['id']}", params={"session_id": self.session_id}).json()
        self.assertIsNone(deleted["current_id"])
        self.assertEqual([item["id"] for item in deleted["items"]], [second["id"]])

        cleared = self.client.delete("/v1/history", params={"session_id": self.session_id}).json()
        self.assertEqual(cleared["items"], [])

    def test_get_history_item(self):
        record = self._analyze().json()
        response = self.client.get(f"/v1/history/{record['id']}", params={"session_id": self.session_id})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["candidateName"], "Jane Doe")

        missing = self.client.get("/v1/history/missing", params={"session_id": self.session_id})
        self.assertEqual(missing.status_code, 404)

    def test_recompute_with_huge_weights(self):
        app.state.sessions = SessionRegistry(
            provider=self.provider, local_storage=self.storage, score_policy="recompute"
        )
        response = self._analyze(weights={"skills": 1e308, "experience": 1e308, "education": 0})
        self.assertEqual(response.status_code, 200)
        self.assertIn(response.json()["overallScore"], (87, 88))

    def test_non_finite_weights_rejected(self):
        body = (
            '{"session_id": "%s", "job_description": "jd", "resume_text": "resume",'
            ' "weights": {"skills": 1e400, "experience": 40, "education": 10}}' % self.session_id
        )
        response = self.client.post(
            "/v1/analysis", content=body, headers={"Content-Type": "application/json"}
        )
        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.provider.calls, [])

    def test_sessions_are_isolated(self):
        self._analyze()
        other = self.client.get("/v1/history", params={"session_id": "session-other-456"}).json()
        self.assertEqual(other["items"], [])

    def test_sign_in_without_remote_store_conflicts(self):
        response = self.client.post(
            "/v1/session/sign-in", json={"session_id": self.session_id, "access_token": "token"}
        )
        self.assertEqual(response.status_code, 409)

    def test_profile_requires_account(self):
        response = self.client.get("/v1/profile", params={"session_id": self.session_id})
        self.assertEqual(response.status_code, 401)
        response = self.client.get("/v1/profile/stats", params={"session_id": self.session_id})
        self.assertEqual(response.status_code, 401)

    def test_extract_text_from_upload(self):
        response = self.client.post(
            "/v1/analysis/extract",
            files={"file": ("resume.txt", "Jane Doe\nGo engineer".encode("utf-8"), "text/plain")},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"file_name": "resume.txt", "text": "Jane Doe\nGo engineer"})

    def test_extract_rejects_unsupported_type(self):
        response = self.client.post(
            "/v1/analysis/extract",
            files={"file": ("resume.png", b"\x89PNG\r\n", "image/png")},
        )
        self.assertEqual(response.status_code, 400)

    def test_service_not_ready(self):
        app.state.sessions = None
        response = self.client.get("/v1/history", params={"session_id": self.session_id})
        self.assertEqual(response.status_code, 503)


class AccountApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        limiter.enabled = False
        cls.client = TestClient(app)

    def setUp(self):
        self.rows: list[dict] = []
        self.profiles: list[dict] = []
        self.profile_methods: list[str] = []
        self.token_valid = True
        remote_client = httpx.AsyncClient(transport=httpx.MockTransport(self._supabase))
        self.storage = LocalStorage(":memory:")
        app.state.sessions = SessionRegistry(
            provider=FakeProvider(),
            local_storage=self.storage,
            remote_client=remote_client,
            supabase_url=SUPABASE_URL,
            supabase_anon_key="anon-key",
        )
        self.session_id = "session-account-123"

    def tearDown(self):
        app.state.sessions = None
        self.storage.close()

    def _supabase(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/auth/v1/user":
            if not self.token_valid:
                return httpx.Response(401, json={"msg": "invalid JWT"})
            return httpx.Response(200, json={"id": "user-1"})
        if request.url.path == "/rest/v1/user_profiles":
            return self._profiles_endpoint(request)
        if request.url.path == "/rest/v1/analysis_results":
            if request.method == "POST":
                row = {**json.loads(request.content), "id": f"uuid-{len(self.rows) + 1}"}
                row["created_at"] = f"2024-03-0{len(self.rows) + 1}T10:00:00+00:00"
                self.rows.append(row)
                return httpx.Response(201, json=[row])
            if request.method == "GET" and request.url.params.get("select") == "overall_score,created_at":
                return httpx.Response(200, json=[{"overall_score": r["overall_score"], "created_at": r["created_at"]} for r in self.rows])
            if "id" in request.url.params:
                wanted = request.url.params["id"].removeprefix("eq.")
                return httpx.Response(200, json=[r for r in self.rows if r["id"] == wanted])
            return httpx.Response(200, json=list(reversed(self.rows)))
        return httpx.Response(404, json={"message": "not found"})

    def _profiles_endpoint(self, request: httpx.Request) -> httpx.Response:
        self.profile_methods.append(request.method)
        if request.method == "GET":
            return httpx.Response(200, json=self.profiles)
        if request.method == "PATCH":
            for profile in self.profiles:
                profile.update(json.loads(request.content))
            return httpx.Response(200, json=self.profiles)
        if request.method == "POST":
            profile = {**json.loads(request.content), "id": "profile-1"}
            self.profiles.append(profile)
            return httpx.Response(201, json=[profile])
        return httpx.Response(405, json={"message": "method not allowed"})

    def _sign_in(self):
        return self.client.post(
            "/v1/session/sign-in", json={"session_id": self.session_id, "access_token": "token-1"}
        )

    def test_health_reports_remote_store(self):
        self.assertTrue(self.client.get("/v1/health").json()["remote_store"])

    def test_sign_in_save_and_stats(self):
        signed_in = self._sign_in()
        self.assertEqual(signed_in.status_code, 200)
        self.assertTrue(signed_in.json()["authenticated"])
        self.assertEqual(signed_in.json()["identity"], "authenticated(user-1)")

        analysis = self.client.post(
            "/v1/analysis",
            json={
                "session_id": self.session_id,
                "job_description": "Senior Go Engineer",
                "resume_text": "Jane Doe resume",
                "weights": {"skills": 50, "experience": 40, "education": 10},
            },
        ).json()
        self.assertEqual(analysis["id"], "uuid-1")
        self.assertEqual(self.rows[0]["user_id"], "user-1")

        stats = self.client.get("/v1/profile/stats", params={"session_id": self.session_id}).json()
        self.assertEqual(stats["total_analyses"], 1)
        self.assertEqual(stats["average_score"], 84)

    def test_rejected_token_is_unauthorized(self):
        self.token_valid = False
        response = self._sign_in()
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"]["code"], "invalid_session")

    def test_sign_out_returns_to_anonymous(self):
        self._sign_in()
        response = self.client.post("/v1/session/sign-out", json={"session_id": self.session_id})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["identity"], "anonymous")

    def test_missing_profile_is_not_found(self):
        self._sign_in()
        response = self.client.get("/v1/profile", params={"session_id": self.session_id})
        self.assertEqual(response.status_code, 404)

    def test_put_profile_creates_then_updates(self):
        self._sign_in()
        created = self.client.put(
            "/v1/profile", params={"session_id": self.session_id}, json={"full_name": "Jane Doe"}
        )
        self.assertEqual(created.status_code, 200)
        self.assertEqual(created.json()["user_id"], "user-1")
        self.assertEqual(created.json()["full_name"], "Jane Doe")
        self.assertEqual(self.profile_methods, ["PATCH", "POST"])

        updated = self.client.put(
            "/v1/profile", params={"session_id": self.session_id}, json={"company": "Acme"}
        )
        self.assertEqual(updated.json()["company"], "Acme")
        self.assertEqual(self.profile_methods, ["PATCH", "POST", "PATCH"])

        fetched = self.client.get("/v1/profile", params={"session_id": self.session_id})
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual(fetched.json()["full_name"], "Jane Doe")

    def test_get_history_item_falls_back_to_remote(self):
        self._sign_in()
        self.rows.append(
            {
                "id": "uuid-9",
                "user_id": "user-1",
                "job_description": "jd",
                "resume_text": "resume",
                "candidate_name": "Late Arrival",
                "overall_score": 71,
                "skills_analysis": {"score": 70, "details": ""},
                "experience_analysis": {"score": 72, "details": ""},
                "education_analysis": {"score": 70, "details": ""},
                "created_at": "2024-03-09T10:00:00+00:00",
            }
        )
        response = self.client.get("/v1/history/uuid-9", params={"session_id": self.session_id})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["candidateName"], "Late Arrival")
        self.assertEqual(response.json()["fileName"], "Saved Analysis")

        missing = self.client.get("/v1/history/uuid-404", params={"session_id": self.session_id})
        self.assertEqual(missing.status_code, 404)


if __name__ == "__main__":
    unittest.main()
