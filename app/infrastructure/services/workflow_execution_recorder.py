"""Execution recorder: claim a dedup window, then finalize the run record once."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from app.application.dtos.workflow import (
    ActionFailed,
    ActionOutcome,
    ActionSucceeded,
    DedupWindow,
    ExecutionClaim,
    ExecutionRecord,
)
from app.application.interfaces.repositories import (
    ITaskRepository,
    IWorkflowExecutionRepository,
)
from app.domain.entities.subject import TriggerSubject
from app.domain.entities.workflow import WorkflowEntity
from app.shared.enums import WorkflowExecutionStatus
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

TASK_ARTIFACT = "task"
SKIPPED_KEY_PREFIX = "skipped:"


def final_status(successful: int, failed: int) -> WorkflowExecutionStatus:
    """completed (no failures), partial (some failed, >=1 succeeded), failed (none succeeded)."""
    if failed == 0:
        return WorkflowExecutionStatus.COMPLETED
    if successful > 0:
        return WorkflowExecutionStatus.PARTIAL
    return WorkflowExecutionStatus.FAILED


class WorkflowExecutionRecorder:
    """Writes execution records. Records are never modified after finalize."""

    def __init__(
        self,
        execution_repo: IWorkflowExecutionRepository,
        task_repo: ITaskRepository,
        *,
        retry_failed_runs: bool = False,
    ) -> None:
        self._execution_repo = execution_repo
        self._task_repo = task_repo
        self._retry_failed_runs = retry_failed_runs

    async def claim(
        self,
        workflow: WorkflowEntity,
        subject: TriggerSubject,
        window: DedupWindow,
        trigger_type: str,
        now: datetime,
    ) -> ExecutionClaim | None:
        """Insert the running record for window; None when another run holds it."""
        return await self._execution_repo.claim(
            tenant_id=workflow.tenant_id,
            workflow_id=workflow.id,
            trigger_type=trigger_type,
            trigger_entity_type=subject.entity_type.value,
            trigger_entity_id=subject.id,
            dedup_key=window.key,
            started_at=now,
        )

    async def record(
        self,
        claim: ExecutionClaim,
        outcomes: Sequence[ActionOutcome],
        completed_at: datetime,
    ) -> ExecutionRecord:
        """Finalize the claimed record from action outcomes.

        Every run is recorded, including wholly-failed ones. With
        retry_failed_runs a wholly-failed record gives its dedup key back so
        the next trigger retries; the row itself stays for audit.
        """
        created_task_ids: list[str] = []
        created_artifact_ids: list[str] = []
        warnings: list[str] = []
        for outcome in outcomes:
            match outcome:
                case ActionSucceeded(artifact_id=artifact_id, artifact_type=artifact_type):
                    created_artifact_ids.append(artifact_id)
                    if artifact_type == TASK_ARTIFACT:
                        created_task_ids.append(artifact_id)
                case ActionFailed(message=message):
                    warnings.append(message)
        successful = len(outcomes) - len(warnings)
        status = final_status(successful, len(warnings))
        release = (
            self._retry_failed_runs
            and status == WorkflowExecutionStatus.FAILED
        )
        record = await self._execution_repo.finalize(
            claim.execution_id,
            claim.tenant_id,
            status=status.value,
            completed_at=completed_at,
            actions_executed=len(outcomes),
            actions_successful=successful,
            actions_failed=len(warnings),
            created_task_ids=created_task_ids,
            created_artifact_ids=created_artifact_ids,
            warnings=warnings,
            release_dedup_key=release,
        )
        await self._task_repo.set_workflow_execution(
            created_task_ids, claim.tenant_id, claim.execution_id
        )
        if release:
            logger.info(
                "Workflow %s failed for %s %s; dedup window released for retry",
                claim.workflow_id,
                claim.trigger_entity_type,
                claim.trigger_entity_id,
            )
        return record

    async def record_skipped(
        self,
        workflow: WorkflowEntity,
        subject: TriggerSubject,
        window: DedupWindow,
        trigger_type: str,
        now: datetime,
    ) -> ExecutionRecord | None:
        """Audit a triggered workflow whose conditions were not met, once per window.

        Returns None when this window was already audited as skipped.
        """
        return await self._execution_repo.record_skipped(
            tenant_id=workflow.tenant_id,
            workflow_id=workflow.id,
            trigger_type=trigger_type,
            trigger_entity_type=subject.entity_type.value,
            trigger_entity_id=subject.id,
            dedup_key=SKIPPED_KEY_PREFIX + window.key,
            now=now,
            reason="Workflow conditions not met",
        )
