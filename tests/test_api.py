"""Tests for the HTTP surface of the assessment service."""
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from backend.api import assessment as assessment_api
from backend.core.errors import (
    GenerationFailed,
    RateLimited,
    RateLimiterUnavailable,
    UpstreamUnavailable,
)
from backend.main import app
from backend.models.schemas import AssessmentResponse


@pytest.fixture
def orchestrator():
    mock = MagicMock()
    mock.get_preferences = AsyncMock()
    mock.get_assessment = AsyncMock()
    assessment_api.set_dependencies(mock)
    yield mock
    assessment_api.set_dependencies(None)


@pytest.fixture
def client(orchestrator):
    # no context manager: the lifespan (real backends) is not started
    return TestClient(app)


class TestPreferencesEndpoint:

    def test_returns_preferences(self, client, orchestrator, preferences, preferences_data):
        orchestrator.get_preferences.return_value = preferences

        response = client.get("/api/v1/preferences", params={"user_id": "u1"})

        assert response.status_code == 200
        assert response.json() == {"userPreferences": preferences_data}
        orchestrator.get_preferences.assert_awaited_once_with("u1")

    def test_missing_user_id(self, client, orchestrator):
        response = client.get("/api/v1/preferences")

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "invalid_input"
        orchestrator.get_preferences.assert_not_called()

    def test_upstream_failure(self, client, orchestrator):
        orchestrator.get_preferences.side_effect = UpstreamUnavailable("Failed to fetch user preferences")

        response = client.get("/api/v1/preferences", params={"user_id": "u1"})

        assert response.status_code == 500


class TestAssessmentEndpoint:

    def test_returns_assessment(self, client, orchestrator, assessment, preferences, assessment_data, preferences_data):
        orchestrator.get_assessment.return_value = AssessmentResponse(
            assessment=assessment, user_preferences=preferences, from_cache=True
        )

        response = client.get("/api/v1/assessment", params={"tutorial_id": "t1", "user_id": "u1"})

        assert response.status_code == 200
        body = response.json()
        assert body["fromCache"] is True
        assert body["userPreferences"] == preferences_data
        assert body["assessment"]["questions"] == assessment_data["questions"]
        orchestrator.get_assessment.assert_awaited_once_with("t1", "u1", skip_cache=False)

    def test_fresh_flag(self, client, orchestrator, assessment, preferences):
        orchestrator.get_assessment.return_value = AssessmentResponse(
            assessment=assessment, user_preferences=preferences, from_cache=False
        )

        client.get("/api/v1/assessment", params={"tutorial_id": "t1", "user_id": "u1", "fresh": "true"})

        orchestrator.get_assessment.assert_awaited_once_with("t1", "u1", skip_cache=True)

    @pytest.mark.parametrize("params", [{"user_id": "u1"}, {"tutorial_id": "t1"}, {"tutorial_id": "", "user_id": "u1"}])
    def test_missing_ids(self, client, orchestrator, params):
        response = client.get("/api/v1/assessment", params=params)

        assert response.status_code == 400
        orchestrator.get_assessment.assert_not_called()

    def test_rate_limited(self, client, orchestrator):
        orchestrator.get_assessment.side_effect = RateLimited("Rate limit exceeded.")

        response = client.get("/api/v1/assessment", params={"tutorial_id": "t1", "user_id": "u1"})

        assert response.status_code == 500
        assert response.json()["detail"] == {"error": "rate_limited", "message": "Rate limit exceeded."}

    def test_generation_failed_is_distinct(self, client, orchestrator):
        orchestrator.get_assessment.side_effect = GenerationFailed("Failed to generate assessment questions.")

        response = client.get("/api/v1/assessment", params={"tutorial_id": "t1", "user_id": "u1"})

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "generation_failed"

    def test_rate_limiter_unavailable(self, client, orchestrator):
        orchestrator.get_assessment.side_effect = RateLimiterUnavailable("unavailable")

        response = client.get("/api/v1/assessment", params={"tutorial_id": "t1", "user_id": "u1"})

        assert response.status_code == 503


class TestHealth:

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy", "version": "1.0.0"}

    def test_error_bodies_are_documented(self, client):
        schema = client.get("/openapi.json").json()

        responses = schema["paths"]["/api/v1/assessment"]["get"]["responses"]
        for status in ("400", "500", "503"):
            ref = responses[status]["content"]["application/json"]["schema"]["$ref"]
            assert ref.endswith("/HTTPErrorResponse")
        assert set(schema["components"]["schemas"]["ErrorResponse"]["properties"]) == {"error", "message"}
