"""Scheduler endpoint tests: cron authentication and response shape (use case faked)."""

import pytest
from httpx import AsyncClient
from starlette.requests import Request

from app.api.v1.dependencies import get_run_workflow_triggers_use_case, is_cron_authorized
from app.application.dtos.workflow import TriggerRunSummary
from app.core.config import Settings
from app.infrastructure.persistence import database
from app.main import app

URL = "/api/v1/cron/workflow-triggers"
SECRET = "cron-test-secret"


class FakeUseCase:
    """Returns a canned summary and records calls."""

    def __init__(self, summary: TriggerRunSummary) -> None:
        self.summary = summary
        self.calls = 0

    async def run(self, now=None, *, only_tenant=None) -> TriggerRunSummary:
        self.calls += 1
        return self.summary


@pytest.fixture
def production_cron(monkeypatch: pytest.MonkeyPatch) -> None:
    """Production settings with a configured cron secret."""
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("CRON_SECRET", SECRET)


@pytest.fixture
def fake_use_case() -> FakeUseCase:
    use_case = FakeUseCase(
        TriggerRunSummary(
            triggers_processed=4,
            workflows_executed=3,
            events_processed=2,
            errors=[],
            tenants=["t1", "t2"],
            duration_ms=12,
        )
    )
    app.dependency_overrides[get_run_workflow_triggers_use_case] = lambda: use_case
    return use_case


def _request(headers: dict[str, str]) -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": URL,
            "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
        }
    )


def test_is_cron_authorized_header_and_bearer() -> None:
    """Provider header or Bearer token with the right secret authorizes."""
    settings = Settings(environment="production", cron_secret=SECRET)
    assert is_cron_authorized(_request({"x-vercel-cron-secret": SECRET}), settings)
    assert is_cron_authorized(_request({"Authorization": f"Bearer {SECRET}"}), settings)
    assert is_cron_authorized(_request({"Authorization": f"bearer {SECRET}"}), settings)
    assert not is_cron_authorized(_request({"Authorization": "Bearer wrong"}), settings)
    assert not is_cron_authorized(_request({"Authorization": SECRET}), settings)
    assert not is_cron_authorized(_request({}), settings)


def test_is_cron_authorized_without_secret() -> None:
    """Without a configured secret only development is open."""
    assert not is_cron_authorized(
        _request({"Authorization": "Bearer "}), Settings(environment="production")
    )
    assert is_cron_authorized(_request({}), Settings(environment="development"))


def test_custom_secret_header_name() -> None:
    """The provider header name is configurable."""
    settings = Settings(
        environment="staging", cron_secret=SECRET, cron_secret_header_name="X-Cron-Key"
    )
    assert is_cron_authorized(_request({"X-Cron-Key": SECRET}), settings)
    assert not is_cron_authorized(_request({"x-vercel-cron-secret": SECRET}), settings)


async def test_missing_secret_returns_401(
    client: AsyncClient, production_cron: None, fake_use_case: FakeUseCase
) -> None:
    """Unauthenticated calls are rejected before the use case runs."""
    response = await client.get(URL)
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    assert fake_use_case.calls == 0


async def test_wrong_secret_returns_401(
    client: AsyncClient, production_cron: None, fake_use_case: FakeUseCase
) -> None:
    """A wrong bearer token is rejected."""
    response = await client.post(URL, headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


async def test_unauthorized_without_database(
    client: AsyncClient, production_cron: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Authentication runs before any database dependency."""
    monkeypatch.setenv("DATABASE_URL", "")
    response = await client.get(URL)
    assert response.status_code == 401


async def test_authorized_run_without_database_is_fatal(
    client: AsyncClient, production_cron: None, monkeypatch: pytest.MonkeyPatch
) -> None:
    """No database: the pass fails fatally and still answers with the summary shape."""
    monkeypatch.setenv("DATABASE_URL", "")
    monkeypatch.setattr(database, "AsyncSessionLocal", None)
    response = await client.get(URL, headers={"Authorization": f"Bearer {SECRET}"})
    assert response.status_code == 500
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "This operation requires a SQL database that is not configured."
    assert data["workflowsExecuted"] == 0
    assert data["tenants"] == []


@pytest.mark.parametrize("method", ["GET", "POST"])
async def test_authorized_run_returns_summary(
    client: AsyncClient, production_cron: None, fake_use_case: FakeUseCase, method: str
) -> None:
    """GET and POST behave the same and return the camelCase summary."""
    response = await client.request(method, URL, headers={"x-vercel-cron-secret": SECRET})
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "triggersProcessed": 4,
        "workflowsExecuted": 3,
        "eventsProcessed": 2,
        "errors": [],
        "tenants": ["t1", "t2"],
        "duration": 12,
    }
    assert fake_use_case.calls == 1


async def test_errors_are_reported_with_200(
    client: AsyncClient, production_cron: None, fake_use_case: FakeUseCase
) -> None:
    """Per-tenant errors make success false but the call still succeeds."""
    fake_use_case.summary = TriggerRunSummary(errors=["[Acme] Failed to fetch events: timeout"])
    response = await client.get(URL, headers={"Authorization": f"Bearer {SECRET}"})
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is False
    assert data["errors"] == ["[Acme] Failed to fetch events: timeout"]


async def test_no_tenants_message(
    client: AsyncClient, production_cron: None, fake_use_case: FakeUseCase
) -> None:
    """An empty run carries the message field."""
    fake_use_case.summary = TriggerRunSummary(message="No active tenants to process")
    response = await client.get(URL, headers={"Authorization": f"Bearer {SECRET}"})
    assert response.status_code == 200
    assert response.json()["message"] == "No active tenants to process"


async def test_fatal_run_returns_500(
    client: AsyncClient, production_cron: None, fake_use_case: FakeUseCase
) -> None:
    """A fatal pass returns 500 with the error string."""
    fake_use_case.summary = TriggerRunSummary(fatal=True, error="database is down")
    response = await client.get(URL, headers={"Authorization": f"Bearer {SECRET}"})
    assert response.status_code == 500
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "database is down"


async def test_development_skips_authentication(
    client: AsyncClient, monkeypatch: pytest.MonkeyPatch, fake_use_case: FakeUseCase
) -> None:
    """Local development runs need no secret."""
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.delenv("CRON_SECRET", raising=False)
    response = await client.get(URL)
    assert response.status_code == 200
