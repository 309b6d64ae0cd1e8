"""Workflow engine: run matching workflows for a trigger subject (implements IWorkflowRunner).

Per workflow, in lookup order: matcher, dedup pre-check, claim of the dedup
window, ordered actions, final record. Everything runs on the caller's
session; the caller owns the transaction.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.task import TaskResult
from app.application.dtos.workflow import ActionContext, ActionOutcome, WorkflowRunResult
from app.application.interfaces.repositories import IWorkflowRepository
from app.application.interfaces.services import IActionExecutor, IDedupGuard
from app.application.services.trigger_matcher import (
    MatchOutcome,
    evaluate,
    valid_days_before,
)
from app.domain.entities.subject import TriggerSubject
from app.domain.entities.tenant import TenantConfig
from app.domain.entities.workflow import WorkflowEntity
from app.infrastructure.persistence.repositories.notification_repo import (
    NotificationRepository,
)
from app.infrastructure.persistence.repositories.task_repo import (
    TaskRepository,
    TaskTemplateRepository,
)
from app.infrastructure.persistence.repositories.tenant_repo import TenantRepository
from app.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowExecutionRepository,
    WorkflowRepository,
)
from app.infrastructure.services.workflow_action_executor import WorkflowActionExecutor
from app.infrastructure.services.workflow_assignee_resolver import (
    TenantSettingsRoleResolver,
)
from app.infrastructure.services.workflow_dedup_guard import WorkflowDedupGuard
from app.infrastructure.services.workflow_execution_recorder import (
    WorkflowExecutionRecorder,
)
from app.shared.enums import WorkflowRunStatus, WorkflowTriggerType
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import TracedOperation
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class WorkflowEngine:
    """Offers trigger subjects to workflows and records what ran."""

    def __init__(
        self,
        workflow_repo: IWorkflowRepository,
        guard: IDedupGuard,
        recorder: WorkflowExecutionRecorder,
        executor: IActionExecutor,
    ) -> None:
        self.workflow_repo = workflow_repo
        self._guard = guard
        self._recorder = recorder
        self._executor = executor

    @classmethod
    def for_session(
        cls, db: AsyncSession, *, retry_failed_runs: bool = False
    ) -> WorkflowEngine:
        """Engine wired to Postgres repositories on one session."""
        execution_repo = WorkflowExecutionRepository(db)
        task_repo = TaskRepository(db)
        return cls(
            workflow_repo=WorkflowRepository(db),
            guard=WorkflowDedupGuard(execution_repo),
            recorder=WorkflowExecutionRecorder(
                execution_repo, task_repo, retry_failed_runs=retry_failed_runs
            ),
            executor=WorkflowActionExecutor(
                db,
                task_repo,
                TaskTemplateRepository(db),
                NotificationRepository(db),
                role_resolver=TenantSettingsRoleResolver(TenantRepository(db)),
            ),
        )

    async def run_for_subject(
        self,
        workflows: list[WorkflowEntity],
        subject: TriggerSubject,
        *,
        tenant_config: TenantConfig,
        now: datetime,
        previous_status: str | None = None,
        days_before: int | None = None,
        user_id: str | None = None,
    ) -> list[WorkflowRunResult]:
        """Run each workflow against subject; one result per workflow, in order."""
        results: list[WorkflowRunResult] = []
        for workflow in workflows:
            async with TracedOperation(
                "workflow.run",
                {
                    "workflow_id": workflow.id,
                    "trigger_type": workflow.trigger_type,
                    "entity_id": subject.id,
                },
            ) as op:
                result = await self._run_one(
                    workflow,
                    subject,
                    tenant_config=tenant_config,
                    now=now,
                    previous_status=previous_status,
                    days_before=days_before,
                    user_id=user_id,
                )
                if op.span is not None:
                    op.span.set_attribute("run_status", result.status.value)
            results.append(result)
        return results

    async def _run_one(
        self,
        workflow: WorkflowEntity,
        subject: TriggerSubject,
        *,
        tenant_config: TenantConfig,
        now: datetime,
        previous_status: str | None,
        days_before: int | None,
        user_id: str | None,
    ) -> WorkflowRunResult:
        if workflow.tenant_id != tenant_config.tenant_id:
            # Never run a workflow outside the tenant being processed.
            logger.warning(
                "Workflow %s (tenant_id=%s) offered to tenant %s; ignored",
                workflow.id,
                workflow.tenant_id,
                tenant_config.tenant_id,
            )
            return WorkflowRunResult(workflow.id, workflow.name, WorkflowRunStatus.NOT_MATCHED)

        outcome = evaluate(
            workflow, subject, now, config=tenant_config, previous_status=previous_status
        )
        if outcome == MatchOutcome.TRIGGER_MISMATCH:
            return WorkflowRunResult(workflow.id, workflow.name, WorkflowRunStatus.NOT_MATCHED)

        window = self._guard.window_for(workflow.trigger_type, subject, now, tenant_config)
        if outcome == MatchOutcome.CONDITIONS_FAILED:
            skipped = await self._recorder.record_skipped(
                workflow, subject, window, workflow.trigger_type, now
            )
            return WorkflowRunResult(
                workflow.id, workflow.name, WorkflowRunStatus.NOT_MATCHED, skipped
            )

        if await self._guard.has_already_run(
            workflow.id, subject.id, tenant_config.tenant_id, window
        ):
            logger.debug(
                "Workflow %s already ran for %s %s in window %s",
                workflow.id,
                subject.entity_type.value,
                subject.id,
                window.key,
            )
            return WorkflowRunResult(workflow.id, workflow.name, WorkflowRunStatus.ALREADY_RUN)

        claim = await self._recorder.claim(
            workflow, subject, window, workflow.trigger_type, now
        )
        if claim is None:
            logger.info(
                "Workflow %s lost dedup claim for %s %s (window %s); concurrent run",
                workflow.id,
                subject.entity_type.value,
                subject.id,
                window.key,
            )
            return WorkflowRunResult(workflow.id, workflow.name, WorkflowRunStatus.ALREADY_RUN)

        if (
            days_before is None
            and workflow.trigger_type == WorkflowTriggerType.EVENT_DATE_APPROACHING.value
        ):
            days_before = valid_days_before(workflow.trigger_config)
        context = ActionContext(
            tenant_config=tenant_config,
            workflow=workflow,
            now=now,
            days_before=days_before,
            user_id=user_id,
        )
        outcomes: list[ActionOutcome] = []
        for action in workflow.ordered_actions():
            outcomes.append(await self._executor.execute(action, subject, context))

        record = await self._recorder.record(claim, outcomes, utc_now())
        logger.info(
            "Workflow %s executed for %s %s: status=%s actions=%d failed=%d",
            workflow.id,
            subject.entity_type.value,
            subject.id,
            record.status,
            record.actions_executed,
            record.actions_failed,
        )
        return WorkflowRunResult(workflow.id, workflow.name, WorkflowRunStatus.EXECUTED, record)

    async def on_task_status_changed(
        self,
        task: TaskResult,
        previous_status: str,
        tenant_config: TenantConfig,
        *,
        user_id: str | None = None,
        now: datetime | None = None,
    ) -> list[WorkflowRunResult]:
        """Domain-event entry point after a task status update."""
        workflows = await self.workflow_repo.get_active_by_trigger(
            tenant_config.tenant_id, WorkflowTriggerType.TASK_STATUS_CHANGED.value
        )
        return await self.run_for_subject(
            workflows,
            task.to_subject(),
            tenant_config=tenant_config,
            now=now or utc_now(),
            previous_status=previous_status,
            user_id=user_id,
        )

    async def on_task_created(
        self,
        task: TaskResult,
        tenant_config: TenantConfig,
        *,
        user_id: str | None = None,
        now: datetime | None = None,
    ) -> list[WorkflowRunResult]:
        """Domain-event entry point after a manual task insert."""
        workflows = await self.workflow_repo.get_active_by_trigger(
            tenant_config.tenant_id, WorkflowTriggerType.TASK_CREATED.value
        )
        return await self.run_for_subject(
            workflows,
            task.to_subject(),
            tenant_config=tenant_config,
            now=now or utc_now(),
            user_id=user_id,
        )

    async def on_event_created(
        self,
        event: TriggerSubject,
        tenant_config: TenantConfig,
        *,
        workflows: list[WorkflowEntity] | None = None,
        user_id: str | None = None,
        now: datetime | None = None,
    ) -> list[WorkflowRunResult]:
        """Domain-event entry point after an event insert.

        workflows defaults to every active event_created workflow of the
        tenant; the matcher keeps those listing the event's type.
        """
        if workflows is None:
            workflows = await self.workflow_repo.get_active_by_trigger(
                tenant_config.tenant_id, WorkflowTriggerType.EVENT_CREATED.value
            )
        return await self.run_for_subject(
            workflows,
            event,
            tenant_config=tenant_config,
            now=now or utc_now(),
            user_id=user_id,
        )

    async def on_event_date_approaching(
        self,
        event: TriggerSubject,
        days_before: int,
        tenant_config: TenantConfig,
        *,
        now: datetime | None = None,
    ) -> list[WorkflowRunResult]:
        """Run the tenant's date workflows configured for days_before against one event."""
        workflows = [
            w
            for w in await self.workflow_repo.get_active_by_trigger(
                tenant_config.tenant_id, WorkflowTriggerType.EVENT_DATE_APPROACHING.value
            )
            if valid_days_before(w.trigger_config) == days_before
        ]
        return await self.run_for_subject(
            workflows,
            event,
            tenant_config=tenant_config,
            now=now or utc_now(),
            days_before=days_before,
        )


class TaskWorkflowHooks:
    """Implements ITaskWorkflowHooks: engine entry points inside a SAVEPOINT.

    A failing workflow run is logged and rolled back to the savepoint so the
    task write that fired it still commits.
    """

    def __init__(self, db: AsyncSession, engine: WorkflowEngine) -> None:
        self.db = db
        self._engine = engine

    async def task_created(
        self, task: TaskResult, tenant_config: TenantConfig, *, user_id: str | None = None
    ) -> list[WorkflowRunResult]:
        try:
            async with self.db.begin_nested():
                return await self._engine.on_task_created(task, tenant_config, user_id=user_id)
        except Exception:
            logger.exception(
                "task_created workflows failed for task %s (tenant_id=%s)",
                task.id,
                tenant_config.tenant_id,
            )
            return []

    async def task_status_changed(
        self,
        task: TaskResult,
        previous_status: str,
        tenant_config: TenantConfig,
        *,
        user_id: str | None = None,
    ) -> list[WorkflowRunResult]:
        try:
            async with self.db.begin_nested():
                return await self._engine.on_task_status_changed(
                    task, previous_status, tenant_config, user_id=user_id
                )
        except Exception:
            logger.exception(
                "task_status_changed workflows failed for task %s (tenant_id=%s)",
                task.id,
                tenant_config.tenant_id,
            )
            return []


class EventWorkflowHooks:
    """Implements IEventWorkflowHooks: event_created runs inside a SAVEPOINT."""

    def __init__(self, db: AsyncSession, engine: WorkflowEngine) -> None:
        self.db = db
        self._engine = engine

    async def event_created(
        self,
        event: TriggerSubject,
        tenant_config: TenantConfig,
        *,
        workflows: list[WorkflowEntity] | None = None,
        user_id: str | None = None,
    ) -> list[WorkflowRunResult]:
        try:
            async with self.db.begin_nested():
                return await self._engine.on_event_created(
                    event, tenant_config, workflows=workflows, user_id=user_id
                )
        except Exception:
            logger.exception(
                "event_created workflows failed for event %s (tenant_id=%s)",
                event.id,
                tenant_config.tenant_id,
            )
            return []
