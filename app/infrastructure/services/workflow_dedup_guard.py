"""Deduplication guard: at most one execution per (workflow, subject, window).

The window key is stored on the execution record and guarded by the unique
index on (tenant_id, workflow_id, trigger_entity_id, dedup_key); the claim
made by WorkflowExecutionRecorder is the authoritative check.
has_already_run is the cheap pre-check that avoids a claim round trip.
"""

from __future__ import annotations

from datetime import datetime

from app.application.dtos.workflow import DedupWindow
from app.application.interfaces.repositories import IWorkflowExecutionRepository
from app.domain.entities.subject import TriggerSubject
from app.domain.entities.tenant import TenantConfig
from app.shared.enums import WorkflowTriggerType
from app.shared.utils.datetime import day_bounds_utc


def window_for(
    trigger_type: str, subject: TriggerSubject, now: datetime, config: TenantConfig
) -> DedupWindow:
    """Dedup window of a trigger firing.

    event_date_approaching: the current calendar day in the tenant timezone,
    key = ISO date. task_status_changed: key = status:<new status>, unbounded.
    task_created and event_created: key = created, unbounded. Anything else:
    key = trigger type, unbounded.
    """
    match trigger_type:
        case WorkflowTriggerType.EVENT_DATE_APPROACHING.value:
            today = config.today(now)
            start, end = day_bounds_utc(today, config.zone)
            return DedupWindow(key=today.isoformat(), start=start, end=end)
        case WorkflowTriggerType.TASK_STATUS_CHANGED.value:
            return DedupWindow(key=f"status:{subject.status or ''}")
        case WorkflowTriggerType.TASK_CREATED.value | WorkflowTriggerType.EVENT_CREATED.value:
            return DedupWindow(key="created")
        case _:
            return DedupWindow(key=trigger_type)


class WorkflowDedupGuard:
    """Implements IDedupGuard over the execution record table."""

    def __init__(self, execution_repo: IWorkflowExecutionRepository) -> None:
        self._execution_repo = execution_repo

    def window_for(
        self, trigger_type: str, subject: TriggerSubject, now: datetime, config: TenantConfig
    ) -> DedupWindow:
        return window_for(trigger_type, subject, now, config)

    async def has_already_run(
        self, workflow_id: str, subject_id: str, tenant_id: str, window: DedupWindow
    ) -> bool:
        """True if a record for (tenant, workflow, subject) holds the window key."""
        return await self._execution_repo.exists_for_window(
            tenant_id,
            workflow_id,
            subject_id,
            window.key,
            start=window.start,
            end=window.end,
        )
