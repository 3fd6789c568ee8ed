"""
Tests for the HTTP layer. Auth and the lookup service are overridden.
"""
import pytest
from fastapi.testclient import TestClient

from app.api.routes.application_routes import get_application_service
from app.core.auth import create_access_token, decode_token, get_current_user, hash_password, verify_password
from app.core.errors import NotFoundError
from app.main import app
from app.schemas.schemas import FilterField
from app.services.filter_engine import RETRY_MESSAGE
from app.services.lookup_service import get_lookup_service


@pytest.fixture
def client(fake_lookup):
    app.dependency_overrides[get_lookup_service] = lambda: fake_lookup
    app.dependency_overrides[get_current_user] = lambda: {"user_id": 42, "email": "ada@example.com"}
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealthCheck:

    def test_root(self):
        response = TestClient(app).get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestListApplications:

    def test_no_filters(self, client):
        response = client.get("/api/applications")

        assert response.status_code == 200
        data = response.json()
        assert [a["id"] for a in data["applications"]] == [3, 2, 1]
        assert data["filters"] == {}
        assert data["error"] is None

    def test_combined_filters(self, client):
        response = client.get("/api/applications", params={"status": "waitlist", "company": "Acme"})

        data = response.json()
        assert [a["id"] for a in data["applications"]] == [1]
        assert data["filters"] == {"status": "waitlist", "company": "Acme"}
        assert data["applications"][0]["resume_name"] == "resume_a.pdf"
        assert data["applications"][0]["cover_letter_name"] == "None"

    def test_unknown_query_params_ignored(self, client):
        response = client.get("/api/applications", params={"status": "waitlist", "colour": "red"})

        data = response.json()
        assert [a["id"] for a in data["applications"]] == [2, 1]
        assert data["filters"] == {"status": "waitlist"}

    def test_filter_failure_falls_back(self, client, fake_lookup):
        fake_lookup.field_errors[FilterField.source] = RuntimeError("db down")

        response = client.get("/api/applications", params={"source": "LinkedIn"})

        assert response.status_code == 200
        data = response.json()
        assert [a["id"] for a in data["applications"]] == [3, 2, 1]
        assert data["error"] == RETRY_MESSAGE

    def test_unknown_user_is_404(self, client):
        app.dependency_overrides[get_current_user] = lambda: {"user_id": 99, "email": "ghost@example.com"}

        response = client.get("/api/applications", params={"status": "waitlist"})

        assert response.status_code == 404
        assert "99" in response.json()["detail"]


class StubApplicationService:

    async def get_application(self, user_id, application_id):
        raise NotFoundError(f"Application {application_id} not found")

    async def count_applications_by_statuses(self, user_id, statuses=None):
        return {"waitlist": 2, "rejected": 1}


class TestApplicationRoutes:

    def test_missing_application_is_404(self, client):
        app.dependency_overrides[get_application_service] = StubApplicationService

        response = client.get("/api/applications/12345")

        assert response.status_code == 404
        assert response.json()["detail"] == "Application 12345 not found"

    def test_status_counts(self, client):
        app.dependency_overrides[get_application_service] = StubApplicationService

        response = client.get("/api/applications/status-counts")

        assert response.status_code == 200
        assert response.json() == {"counts": {"waitlist": 2, "rejected": 1}, "total": 3}

    def test_requires_token(self):
        response = TestClient(app).get("/api/applications")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["detail"] == "Not authenticated"

    def test_rejects_bad_token(self):
        response = TestClient(app).get(
            "/api/applications", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"


class TestAuthHelpers:

    def test_token_round_trip(self):
        token = create_access_token({"sub": "42"})

        assert decode_token(token)["sub"] == "42"
        assert decode_token(token + "tampered") is None

    def test_password_hashing(self):
        hashed = hash_password("correct horse")

        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong", hashed)
