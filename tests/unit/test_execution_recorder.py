"""WorkflowExecutionRecorder unit tests (final status, dedup release, skipped audit)."""

from unittest.mock import AsyncMock

import pytest

from app.application.dtos.workflow import ActionFailed, ActionSucceeded, DedupWindow
from app.infrastructure.services.workflow_execution_recorder import (
    WorkflowExecutionRecorder,
    final_status,
)
from app.shared.enums import WorkflowExecutionStatus
from tests.factories import NOW, claim, event_subject, execution_record, workflow


@pytest.mark.parametrize(
    ("successful", "failed", "expected"),
    [
        (2, 0, WorkflowExecutionStatus.COMPLETED),
        (0, 0, WorkflowExecutionStatus.COMPLETED),
        (1, 1, WorkflowExecutionStatus.PARTIAL),
        (0, 2, WorkflowExecutionStatus.FAILED),
    ],
)
def test_final_status(successful: int, failed: int, expected: WorkflowExecutionStatus) -> None:
    """completed without failures, partial with at least one success, else failed."""
    assert final_status(successful, failed) == expected


def _recorder(retry_failed_runs: bool = False):
    execution_repo = AsyncMock()
    execution_repo.finalize = AsyncMock(return_value=execution_record())
    task_repo = AsyncMock()
    recorder = WorkflowExecutionRecorder(
        execution_repo, task_repo, retry_failed_runs=retry_failed_runs
    )
    return recorder, execution_repo, task_repo


async def test_claim_inserts_running_record_with_window_key() -> None:
    """The claim carries the window key and the subject identity."""
    recorder, execution_repo, _ = _recorder()
    execution_repo.claim = AsyncMock(return_value=claim())
    result = await recorder.claim(
        workflow(), event_subject(), DedupWindow(key="2025-03-10"), "event_date_approaching", NOW
    )
    assert result == claim()
    execution_repo.claim.assert_awaited_once_with(
        tenant_id="t1",
        workflow_id="wf1",
        trigger_type="event_date_approaching",
        trigger_entity_type="event",
        trigger_entity_id="ev1",
        dedup_key="2025-03-10",
        started_at=NOW,
    )


async def test_record_counts_outcomes_and_links_tasks() -> None:
    """Counters, ids and warnings come from the outcomes; created tasks get the execution id."""
    recorder, execution_repo, task_repo = _recorder()
    outcomes = [
        ActionSucceeded("task9", "task"),
        ActionFailed("send_notification action a2: no recipient"),
        ActionSucceeded("notif1", "notification"),
    ]
    await recorder.record(claim(), outcomes, NOW)

    kwargs = execution_repo.finalize.await_args.kwargs
    assert execution_repo.finalize.await_args.args == ("ex1", "t1")
    assert kwargs["status"] == "partial"
    assert kwargs["actions_executed"] == 3
    assert kwargs["actions_successful"] == 2
    assert kwargs["actions_failed"] == 1
    assert kwargs["created_task_ids"] == ["task9"]
    assert kwargs["created_artifact_ids"] == ["task9", "notif1"]
    assert kwargs["warnings"] == ["send_notification action a2: no recipient"]
    assert kwargs["release_dedup_key"] is False
    task_repo.set_workflow_execution.assert_awaited_once_with(["task9"], "t1", "ex1")


async def test_failed_run_keeps_dedup_key_by_default() -> None:
    """A wholly failed run still occupies its window."""
    recorder, execution_repo, _ = _recorder()
    await recorder.record(claim(), [ActionFailed("boom")], NOW)
    kwargs = execution_repo.finalize.await_args.kwargs
    assert kwargs["status"] == "failed"
    assert kwargs["release_dedup_key"] is False


async def test_failed_run_releases_key_when_retry_enabled() -> None:
    """With retry_failed_runs the next trigger may run again."""
    recorder, execution_repo, _ = _recorder(retry_failed_runs=True)
    await recorder.record(claim(), [ActionFailed("boom")], NOW)
    assert execution_repo.finalize.await_args.kwargs["release_dedup_key"] is True


async def test_partial_run_never_releases_key() -> None:
    """Only wholly failed runs are retried."""
    recorder, execution_repo, _ = _recorder(retry_failed_runs=True)
    await recorder.record(claim(), [ActionFailed("boom"), ActionSucceeded("t", "task")], NOW)
    assert execution_repo.finalize.await_args.kwargs["release_dedup_key"] is False


async def test_record_skipped_audits_conditions_once_per_window() -> None:
    """Skipped runs carry the reason and a skipped:<window> key the repository inserts once."""
    recorder, execution_repo, _ = _recorder()
    execution_repo.record_skipped = AsyncMock(
        return_value=execution_record(status="skipped", dedup_key="skipped:2025-03-10")
    )
    window = DedupWindow(key="2025-03-10")
    record = await recorder.record_skipped(
        workflow(), event_subject(), window, "event_date_approaching", NOW
    )
    assert record.status == "skipped"
    kwargs = execution_repo.record_skipped.await_args.kwargs
    assert kwargs["reason"] == "Workflow conditions not met"
    assert kwargs["dedup_key"] == "skipped:2025-03-10"

    execution_repo.record_skipped = AsyncMock(return_value=None)
    assert (
        await recorder.record_skipped(
            workflow(), event_subject(), window, "event_date_approaching", NOW
        )
        is None
    )
