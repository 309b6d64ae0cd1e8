"""ApplyWorkflowToExistingUseCase tests: preview counts and per-event outcomes."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.application.dtos.workflow import WorkflowRunResult
from app.application.use_cases.workflows import ApplyWorkflowToExistingUseCase
from app.domain.exceptions import ResourceNotFoundException, WorkflowConfigurationException
from app.infrastructure.services.workflow_dedup_guard import window_for
from app.shared.enums import WorkflowRunStatus
from tests.factories import NOW, event_result, execution_record, tenant_config, workflow

GALA_WORKFLOW = workflow(trigger_type="event_created", event_type_ids=("gala",))


def _run(status: WorkflowRunStatus, record=None) -> list[WorkflowRunResult]:
    return [WorkflowRunResult("wf1", "Event prep", status, execution=record)]


@pytest.fixture
def apply_mocks():
    workflow_repo = AsyncMock()
    workflow_repo.get_entity = AsyncMock(return_value=GALA_WORKFLOW)
    event_repo = AsyncMock()
    event_repo.list_upcoming_by_types = AsyncMock(
        return_value=[event_result("ev1"), event_result("ev2", title="Spring expo")]
    )
    guard = MagicMock()
    guard.window_for = MagicMock(side_effect=window_for)
    guard.has_already_run = AsyncMock(side_effect=[True, False])
    hooks = AsyncMock()
    use_case = ApplyWorkflowToExistingUseCase(workflow_repo, event_repo, guard, hooks)
    return use_case, workflow_repo, event_repo, guard, hooks


async def test_preview_counts_events_already_executed(apply_mocks) -> None:
    """Events whose created window is taken are counted, the rest are eligible."""
    use_case, _, event_repo, guard, hooks = apply_mocks

    preview = await use_case.preview(tenant_config(), "wf1", now=NOW)

    assert preview.total_events == 2
    assert preview.already_executed == 1
    assert [e.id for e in preview.eligible] == ["ev2"]
    event_repo.list_upcoming_by_types.assert_awaited_once_with("t1", ("gala",), date(2025, 3, 10))
    assert guard.has_already_run.await_args.args[:3] == ("wf1", "ev2", "t1")
    hooks.event_created.assert_not_awaited()


async def test_run_classifies_each_event(apply_mocks) -> None:
    """Executed runs count as processed, failed records as failed, dedup hits as skipped."""
    use_case, _, event_repo, _, hooks = apply_mocks
    event_repo.list_upcoming_by_types = AsyncMock(
        return_value=[event_result("ev1"), event_result("ev2"), event_result("ev3"), event_result("ev4")]
    )
    hooks.event_created = AsyncMock(
        side_effect=[
            _run(WorkflowRunStatus.EXECUTED, execution_record(created_task_ids=("task1",))),
            _run(
                WorkflowRunStatus.EXECUTED,
                execution_record(status="failed", warnings=("Task template not found",)),
            ),
            _run(WorkflowRunStatus.ALREADY_RUN),
            [],
        ]
    )

    result = await use_case.run(tenant_config(), "wf1", user_id="u1", now=NOW)

    assert (result.processed, result.failed, result.skipped, result.total_events) == (1, 2, 1, 4)
    assert [(r.event_id, r.status, r.tasks_created) for r in result.results] == [
        ("ev1", "executed", 1),
        ("ev2", "failed", 0),
        ("ev3", "already_run", 0),
        ("ev4", "failed", 0),
    ]
    assert result.results[1].error == "Task template not found"
    assert result.results[3].error == "Workflow run failed"
    assert result.results[0].event_date == date(2025, 3, 13)
    _, kwargs = hooks.event_created.await_args_list[0]
    assert kwargs == {"workflows": [GALA_WORKFLOW], "user_id": "u1"}


async def test_run_unknown_workflow_is_not_found(apply_mocks) -> None:
    use_case, workflow_repo, _, _, _ = apply_mocks
    workflow_repo.get_entity = AsyncMock(return_value=None)
    with pytest.raises(ResourceNotFoundException):
        await use_case.run(tenant_config(), "nope", now=NOW)


@pytest.mark.parametrize(
    ("wf", "field"),
    [
        (workflow(), "trigger_type"),
        (workflow(trigger_type="event_created"), "event_type_ids"),
        (workflow(trigger_type="event_created", event_type_ids=("gala",), is_active=False), "is_active"),
    ],
)
async def test_run_rejects_unusable_workflows(apply_mocks, wf, field) -> None:
    """Only active event_created workflows with event types can be applied."""
    use_case, workflow_repo, event_repo, _, hooks = apply_mocks
    workflow_repo.get_entity = AsyncMock(return_value=wf)
    with pytest.raises(WorkflowConfigurationException) as exc_info:
        await use_case.run(tenant_config(), "wf1", now=NOW)
    assert exc_info.value.details["field"] == field
    event_repo.list_upcoming_by_types.assert_not_awaited()
    hooks.event_created.assert_not_awaited()
