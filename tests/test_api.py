"""Tests for the search endpoint using mocked services."""

from unittest.mock import AsyncMock

import pytest
from conftest import make_repo
from fastapi.testclient import TestClient

from app.errors import UpstreamInvalidQuery, UpstreamRateLimited
from app.models.domain import Analysis, AnalyzedRepository, Pricing
from app.rate_limit import limiter

ANALYSIS = Analysis(
    is_open_source=False,
    pricing=Pricing(type="paid", starting_price="$49"),
    integration_complexity=4,
    complexity_reason="Needs a license server",
)


def analyzed(name: str, stars: int, analysis: Analysis | None = ANALYSIS) -> AnalyzedRepository:
    return AnalyzedRepository(**make_repo(name, stars=stars).model_dump(), analysis=analysis)


@pytest.fixture
def app():
    """Create a test app with mocked services in app.state."""
    from app.main import app as fastapi_app

    mock_pipeline = AsyncMock()
    mock_pipeline.run = AsyncMock(
        return_value=[analyzed("pyyaml", 2500), analyzed("ruamel", 300, analysis=None)]
    )

    mock_history = AsyncMock()
    mock_history.record = AsyncMock(return_value=[7, 8])

    fastapi_app.state.pipeline = mock_pipeline
    fastapi_app.state.search_history = mock_history

    return fastapi_app


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


def test_search_success(client, app):
    resp = client.get(
        "/api/search",
        params={"language": "python", "description": "parse yaml files", "example": "pyyaml"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert [r["name"] for r in data] == ["pyyaml", "ruamel"]

    first = data[0]
    assert first["id"] == 7
    assert first["fullName"] == "owner/pyyaml"
    assert first["stars"] == 2500
    assert first["url"] == "https://github.com/owner/pyyaml"
    assert first["analysis"] == {
        "isOpenSource": False,
        "pricing": {"type": "paid", "startingPrice": "$49"},
        "integrationComplexity": 4,
        "complexityReason": "Needs a license server",
    }
    assert "analysis" not in data[1]

    request = app.state.pipeline.run.call_args.args[0]
    assert request.language == "python"
    assert request.description == "parse yaml files"
    assert request.example == "pyyaml"


def test_search_records_history_with_user(client, app):
    client.get(
        "/api/search", params={"language": "python", "description": "yaml", "userId": 3}
    )
    assert app.state.search_history.record.call_args.kwargs == {"user_id": 3}


def test_search_missing_language_returns_400(client, app):
    resp = client.get("/api/search", params={"description": "parse yaml files"})
    assert resp.status_code == 400
    assert resp.json() == {"message": "Missing required parameters"}
    app.state.pipeline.run.assert_not_awaited()
    app.state.search_history.record.assert_not_awaited()


def test_search_missing_description_returns_400(client, app):
    resp = client.get("/api/search", params={"language": "python"})
    assert resp.status_code == 400
    app.state.pipeline.run.assert_not_awaited()


def test_search_empty_params_return_400(client, app):
    resp = client.get("/api/search", params={"language": "", "description": ""})
    assert resp.status_code == 400


def test_search_empty_results(client, app):
    app.state.pipeline.run = AsyncMock(return_value=[])
    resp = client.get("/api/search", params={"language": "python", "description": "x"})
    assert resp.status_code == 200
    assert resp.json() == []
    app.state.search_history.record.assert_not_awaited()


def test_search_rate_limited_returns_403(client, app):
    app.state.pipeline.run = AsyncMock(
        side_effect=UpstreamRateLimited(
            details={"rateLimit": "0", "message": "API rate limit exceeded"}
        )
    )
    resp = client.get("/api/search", params={"language": "python", "description": "x"})
    assert resp.status_code == 403
    body = resp.json()
    assert body["message"] == "GitHub API rate limit exceeded"
    assert body["details"]["rateLimit"] == "0"


def test_search_invalid_query_returns_422(client, app):
    app.state.pipeline.run = AsyncMock(
        side_effect=UpstreamInvalidQuery(details={"message": "Validation Failed"})
    )
    resp = client.get("/api/search", params={"language": "python", "description": "x"})
    assert resp.status_code == 422
    assert resp.json() == {
        "message": "Invalid search query",
        "details": {"message": "Validation Failed"},
    }


def test_search_unexpected_error_returns_500(client, app):
    app.state.pipeline.run = AsyncMock(side_effect=RuntimeError("socket closed"))
    resp = client.get("/api/search", params={"language": "python", "description": "x"})
    assert resp.status_code == 500
    assert resp.json() == {"message": "Failed to search repositories", "details": "socket closed"}


def test_search_history_failure_still_returns_results(client, app):
    app.state.search_history.record = AsyncMock(side_effect=RuntimeError("db down"))
    resp = client.get("/api/search", params={"language": "python", "description": "x"})
    assert resp.status_code == 200
    data = resp.json()
    assert len(data) == 2
    assert "id" not in data[0]


def test_search_non_numeric_user_returns_400(client, app):
    resp = client.get(
        "/api/search", params={"language": "python", "description": "x", "userId": "abc"}
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Invalid request parameters"
    assert body["details"][0]["loc"] == ["query", "userId"]
    app.state.pipeline.run.assert_not_awaited()


@pytest.fixture
def enabled_limiter(monkeypatch):
    monkeypatch.setattr(limiter, "enabled", True)
    limiter.reset()
    yield limiter
    limiter.reset()


def test_search_rate_limit_returns_429(client, enabled_limiter):
    params = {"language": "python", "description": "x"}
    statuses = [client.get("/api/search", params=params).status_code for _ in range(10)]
    assert statuses == [200] * 10

    resp = client.get("/api/search", params=params)
    assert resp.status_code == 429
    assert resp.json() == {
        "message": "Too many requests",
        "details": {"limit": "10 per 1 minute"},
    }
