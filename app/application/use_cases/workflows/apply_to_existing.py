"""Apply an event_created workflow to events that already exist.

Covers events created before the workflow (or before its event types were
added). Only upcoming, non-cancelled events of the workflow's event types
are offered; the dedup window ("created") makes repeated applications safe.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING

from app.domain.exceptions import ResourceNotFoundException, WorkflowConfigurationException
from app.shared.enums import WorkflowExecutionStatus, WorkflowRunStatus, WorkflowTriggerType
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from app.application.dtos.event import EventResult
    from app.application.dtos.workflow import WorkflowRunResult
    from app.application.interfaces.repositories import IEventRepository, IWorkflowRepository
    from app.application.interfaces.services import IDedupGuard, IEventWorkflowHooks
    from app.domain.entities.tenant import TenantConfig
    from app.domain.entities.workflow import WorkflowEntity

logger = get_logger(__name__)

FAILED = "failed"


@dataclass(frozen=True)
class AppliedEvent:
    """What happened to one event."""

    event_id: str
    title: str
    event_date: date | None
    status: str
    tasks_created: int = 0
    error: str | None = None


@dataclass
class ApplyPreview:
    """Events an application would offer the workflow to."""

    total_events: int = 0
    already_executed: int = 0
    eligible: list[EventResult] = field(default_factory=list)


@dataclass
class ApplyResult:
    processed: int = 0
    failed: int = 0
    skipped: int = 0
    total_events: int = 0
    results: list[AppliedEvent] = field(default_factory=list)


def _classify(event: EventResult, runs: list[WorkflowRunResult]) -> AppliedEvent:
    event_day = event.start_date or event.event_date
    if not runs:
        return AppliedEvent(event.id, event.title, event_day, FAILED, error="Workflow run failed")
    run = runs[0]
    if run.status != WorkflowRunStatus.EXECUTED or run.execution is None:
        return AppliedEvent(event.id, event.title, event_day, run.status.value)
    record = run.execution
    if record.status == WorkflowExecutionStatus.FAILED.value:
        return AppliedEvent(
            event.id, event.title, event_day, FAILED, error="; ".join(record.warnings) or None
        )
    return AppliedEvent(
        event.id,
        event.title,
        event_day,
        run.status.value,
        tasks_created=len(record.created_task_ids),
    )


class ApplyWorkflowToExistingUseCase:
    """Preview and run one event_created workflow against upcoming events."""

    def __init__(
        self,
        workflow_repo: IWorkflowRepository,
        event_repo: IEventRepository,
        guard: IDedupGuard,
        hooks: IEventWorkflowHooks,
    ) -> None:
        self._workflow_repo = workflow_repo
        self._event_repo = event_repo
        self._guard = guard
        self._hooks = hooks

    async def _load(self, workflow_id: str, tenant_id: str) -> WorkflowEntity:
        workflow = await self._workflow_repo.get_entity(workflow_id, tenant_id)
        if workflow is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        if workflow.trigger_type != WorkflowTriggerType.EVENT_CREATED.value:
            raise WorkflowConfigurationException(
                "Only event_created workflows can be applied to existing events",
                field="trigger_type",
            )
        if not workflow.event_type_ids:
            raise WorkflowConfigurationException(
                "Workflow has no event types configured", field="event_type_ids"
            )
        return workflow

    async def _upcoming(
        self, workflow: WorkflowEntity, tenant_config: TenantConfig, now: datetime
    ) -> list[EventResult]:
        return await self._event_repo.list_upcoming_by_types(
            tenant_config.tenant_id, workflow.event_type_ids, tenant_config.today(now)
        )

    async def preview(
        self, tenant_config: TenantConfig, workflow_id: str, *, now: datetime | None = None
    ) -> ApplyPreview:
        """Count upcoming events and those whose dedup window is already taken."""
        now = now or utc_now()
        workflow = await self._load(workflow_id, tenant_config.tenant_id)
        events = await self._upcoming(workflow, tenant_config, now)
        preview = ApplyPreview(total_events=len(events))
        for event in events:
            window = self._guard.window_for(
                workflow.trigger_type, event.to_subject(), now, tenant_config
            )
            if await self._guard.has_already_run(
                workflow.id, event.id, tenant_config.tenant_id, window
            ):
                preview.already_executed += 1
            else:
                preview.eligible.append(event)
        return preview

    async def run(
        self,
        tenant_config: TenantConfig,
        workflow_id: str,
        *,
        user_id: str | None = None,
        now: datetime | None = None,
    ) -> ApplyResult:
        """Offer every upcoming event to the workflow, one savepoint per event."""
        now = now or utc_now()
        workflow = await self._load(workflow_id, tenant_config.tenant_id)
        if not workflow.is_active:
            raise WorkflowConfigurationException(
                "Cannot apply an inactive workflow", field="is_active"
            )
        events = await self._upcoming(workflow, tenant_config, now)
        result = ApplyResult(total_events=len(events))
        for event in events:
            runs = await self._hooks.event_created(
                event.to_subject(), tenant_config, workflows=[workflow], user_id=user_id
            )
            applied = _classify(event, runs)
            result.results.append(applied)
            if applied.status == FAILED:
                result.failed += 1
            elif applied.status == WorkflowRunStatus.EXECUTED.value:
                result.processed += 1
            else:
                result.skipped += 1
        logger.info(
            "Workflow %s applied to existing events (tenant_id=%s): processed=%d failed=%d skipped=%d",
            workflow.id,
            tenant_config.tenant_id,
            result.processed,
            result.failed,
            result.skipped,
        )
        return result
