"""RunWorkflowTriggersUseCase tests over an in-memory trigger store."""

from contextlib import asynccontextmanager
from datetime import date
from unittest.mock import AsyncMock, MagicMock

from app.application.dtos.tenant import TenantResult
from app.application.dtos.workflow import WorkflowRunResult
from app.application.use_cases.workflows import RunWorkflowTriggersUseCase
from app.application.use_cases.workflows.run_workflow_triggers import (
    NO_ACTIVE_TENANTS_MESSAGE,
)
from app.domain.enums import TenantStatus
from app.shared.enums import WorkflowRunStatus
from tests.factories import NOW, event_subject, workflow


def _tenant(tenant_id: str = "t1", name: str = "Acme", code: str = "acme") -> TenantResult:
    return TenantResult(id=tenant_id, code=code, name=name, status=TenantStatus.ACTIVE)


def _executed(workflows, subject, **kwargs) -> list[WorkflowRunResult]:
    return [WorkflowRunResult(w.id, w.name, WorkflowRunStatus.EXECUTED) for w in workflows]


class FakeStore:
    """IWorkflowTriggerStore double: one shared unit of work for every tenant."""

    def __init__(self, tenants, workflows_by_tenant, events_by_date) -> None:
        self.tenants = tenants
        self.scopes: list[str] = []
        self.failing_tenants: set[str] = set()
        self.uow = MagicMock()
        self.uow.workflows.get_active_by_trigger = AsyncMock(
            side_effect=lambda tenant_id, trigger: workflows_by_tenant.get(tenant_id, [])
        )
        self.uow.events.list_by_target_date = AsyncMock(
            side_effect=lambda tenant_id, target: events_by_date.get(target, [])
        )
        self.uow.runner.run_for_subject = AsyncMock(side_effect=_executed)
        self.uow.commit = AsyncMock()
        self.uow.rollback = AsyncMock()

    async def list_active_tenants(self):
        if isinstance(self.tenants, Exception):
            raise self.tenants
        return self.tenants

    @asynccontextmanager
    async def tenant_scope(self, tenant_id: str):
        if tenant_id in self.failing_tenants:
            raise RuntimeError("could not set tenant context")
        self.scopes.append(tenant_id)
        yield self.uow


def _store(**overrides) -> FakeStore:
    values = {
        "tenants": [_tenant()],
        "workflows_by_tenant": {
            "t1": [workflow("wf1"), workflow("wf7", trigger_config={"days_before": 7})]
        },
        "events_by_date": {
            date(2025, 3, 13): [event_subject("ev1"), event_subject("ev2")],
            date(2025, 3, 17): [event_subject("ev3", start=date(2025, 3, 17))],
        },
    }
    values.update(overrides)
    return FakeStore(**values)


async def test_counts_pairs_events_and_executions() -> None:
    """Each (event, workflow) pair is one trigger and is committed on its own."""
    store = _store()
    summary = await RunWorkflowTriggersUseCase(store).run(NOW)

    assert summary.success
    assert summary.tenants == ["t1"]
    assert summary.events_processed == 3
    assert summary.triggers_processed == 3
    assert summary.workflows_executed == 3
    assert summary.errors == []
    assert summary.message is None
    assert store.uow.commit.await_count == 3
    store.uow.events.list_by_target_date.assert_any_await("t1", date(2025, 3, 13))
    store.uow.events.list_by_target_date.assert_any_await("t1", date(2025, 3, 17))


async def test_days_before_is_passed_to_runner() -> None:
    """The runner receives the offset the event was found for."""
    store = _store(events_by_date={date(2025, 3, 17): [event_subject("ev3", start=date(2025, 3, 17))]})
    await RunWorkflowTriggersUseCase(store).run(NOW)

    call = store.uow.runner.run_for_subject.await_args
    assert [w.id for w in call.args[0]] == ["wf7"]
    assert call.kwargs["days_before"] == 7
    assert call.kwargs["now"] == NOW
    assert call.kwargs["tenant_config"].tenant_id == "t1"


async def test_already_run_is_processed_but_not_executed() -> None:
    """Dedup hits still count as processed triggers."""
    store = _store()
    store.uow.runner.run_for_subject = AsyncMock(
        side_effect=lambda workflows, subject, **kw: [
            WorkflowRunResult(w.id, w.name, WorkflowRunStatus.ALREADY_RUN) for w in workflows
        ]
    )
    summary = await RunWorkflowTriggersUseCase(store).run(NOW)
    assert summary.triggers_processed == 3
    assert summary.workflows_executed == 0


async def test_pair_failure_is_reported_and_rolled_back() -> None:
    """One failing pair is listed with the tenant name; the rest still run."""
    store = _store()

    async def run_for_subject(workflows, subject, **kwargs):
        if subject.id == "ev1":
            raise RuntimeError("boom")
        return _executed(workflows, subject)

    store.uow.runner.run_for_subject = AsyncMock(side_effect=run_for_subject)
    summary = await RunWorkflowTriggersUseCase(store).run(NOW)

    assert not summary.success
    assert summary.errors == ["[Acme] Failed to execute workflow wf1 for event ev1: boom"]
    assert summary.triggers_processed == 3
    assert summary.workflows_executed == 2
    store.uow.rollback.assert_awaited_once()


async def test_event_fetch_failure_is_reported() -> None:
    """A failing event query skips that offset and records the error."""
    store = _store()
    store.uow.events.list_by_target_date = AsyncMock(side_effect=RuntimeError("timeout"))
    summary = await RunWorkflowTriggersUseCase(store).run(NOW)
    assert summary.errors == [
        "[Acme] Failed to fetch events: timeout",
        "[Acme] Failed to fetch events: timeout",
    ]
    assert summary.triggers_processed == 0


async def test_workflow_fetch_failure_is_reported() -> None:
    """A failing workflow query ends that tenant's pass with an error."""
    store = _store()
    store.uow.workflows.get_active_by_trigger = AsyncMock(side_effect=RuntimeError("gone"))
    summary = await RunWorkflowTriggersUseCase(store).run(NOW)
    assert summary.errors == ["[Acme] Failed to fetch workflows: gone"]


async def test_failing_tenant_does_not_stop_others() -> None:
    """Tenant-level errors are prefixed with the tenant name; later tenants run."""
    store = _store(
        tenants=[_tenant("t0", "Broken Co", "broken"), _tenant()],
    )
    store.failing_tenants.add("t0")
    summary = await RunWorkflowTriggersUseCase(store).run(NOW)

    assert summary.tenants == ["t0", "t1"]
    assert summary.errors == ["[Broken Co] could not set tenant context"]
    assert summary.workflows_executed == 3
    assert store.scopes == ["t1"]


async def test_invalid_days_before_is_skipped() -> None:
    """Misconfigured date workflows are ignored, not errors."""
    store = _store(workflows_by_tenant={"t1": [workflow("bad", trigger_config={"days_before": -2})]})
    summary = await RunWorkflowTriggersUseCase(store).run(NOW)
    assert summary.success
    assert summary.triggers_processed == 0
    store.uow.events.list_by_target_date.assert_not_awaited()


async def test_no_active_tenants() -> None:
    """An empty tenant list is a successful run with a message."""
    summary = await RunWorkflowTriggersUseCase(_store(tenants=[])).run(NOW)
    assert summary.success
    assert summary.tenants == []
    assert summary.message == NO_ACTIVE_TENANTS_MESSAGE


async def test_fatal_error_sets_summary_error() -> None:
    """Failure to list tenants is fatal and never raised."""
    summary = await RunWorkflowTriggersUseCase(
        _store(tenants=RuntimeError("database is down"))
    ).run(NOW)
    assert summary.fatal
    assert not summary.success
    assert summary.error == "database is down"


async def test_only_tenant_matches_id_or_code() -> None:
    """only_tenant restricts the pass to one tenant, by id or by code."""
    tenants = [_tenant(), _tenant("t2", "Globex", "globex")]
    by_code = _store(tenants=tenants)
    summary = await RunWorkflowTriggersUseCase(by_code).run(NOW, only_tenant="globex")
    assert summary.tenants == ["t2"]

    by_id = _store(tenants=tenants)
    summary = await RunWorkflowTriggersUseCase(by_id).run(NOW, only_tenant="t1")
    assert summary.tenants == ["t1"]

    unknown = _store(tenants=tenants)
    summary = await RunWorkflowTriggersUseCase(unknown).run(NOW, only_tenant="nope")
    assert summary.message == NO_ACTIVE_TENANTS_MESSAGE
