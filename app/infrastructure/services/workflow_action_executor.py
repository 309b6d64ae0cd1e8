"""Workflow action executor (implements IActionExecutor).

Each action runs in its own SAVEPOINT: a failing action rolls back only its
own writes, becomes an ActionFailed outcome and later actions still run.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import date, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.task import TaskCreate
from app.application.dtos.workflow import (
    ActionContext,
    ActionFailed,
    ActionOutcome,
    ActionSucceeded,
)
from app.application.interfaces.repositories import (
    INotificationRepository,
    ITaskRepository,
    ITaskTemplateRepository,
)
from app.application.interfaces.services import IRoleAssigneeResolver
from app.domain.entities.subject import TriggerSubject
from app.domain.entities.workflow import WorkflowActionEntity
from app.domain.exceptions import ActionExecutionException
from app.infrastructure.services.workflow_template_renderer import (
    WorkflowTemplateRenderer,
    build_placeholder_context,
)
from app.shared.enums import NotificationPriority, TriggerEntityType, WorkflowActionType
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_Handler = Callable[
    [WorkflowActionEntity, TriggerSubject, ActionContext], Awaitable[ActionSucceeded]
]


def due_date_for(
    offset_days: int | None, subject: TriggerSubject, today: date
) -> date | None:
    """reference date + offset; reference is the subject's earliest date, else today."""
    if offset_days is None:
        return None
    reference = subject.earliest_date or today
    return reference + timedelta(days=offset_days)


class WorkflowActionExecutor:
    """Runs create_task, assign_task and send_notification actions."""

    def __init__(
        self,
        db: AsyncSession,
        task_repo: ITaskRepository,
        template_repo: ITaskTemplateRepository,
        notification_repo: INotificationRepository,
        *,
        renderer: WorkflowTemplateRenderer | None = None,
        role_resolver: IRoleAssigneeResolver | None = None,
    ) -> None:
        self.db = db
        self._task_repo = task_repo
        self._template_repo = template_repo
        self._notification_repo = notification_repo
        self._renderer = renderer or WorkflowTemplateRenderer()
        self._role_resolver = role_resolver
        self._handlers: dict[str, _Handler] = {
            WorkflowActionType.CREATE_TASK.value: self._create_task,
            WorkflowActionType.ASSIGN_TASK.value: self._assign_task,
            WorkflowActionType.SEND_NOTIFICATION.value: self._send_notification,
        }

    async def execute(
        self,
        action: WorkflowActionEntity,
        subject: TriggerSubject,
        context: ActionContext,
    ) -> ActionOutcome:
        """Run one action; failures are returned, never raised."""
        handler = self._handlers.get(action.action_type)
        if handler is None:
            return ActionFailed(f"Unknown action type: {action.action_type}")
        try:
            async with self.db.begin_nested():
                return await handler(action, subject, context)
        except Exception as e:
            logger.warning(
                "Workflow %s action %s (%s) failed for %s %s: %s",
                context.workflow.id,
                action.id,
                action.action_type,
                subject.entity_type.value,
                subject.id,
                e,
            )
            message = e.message if isinstance(e, ActionExecutionException) else str(e)
            return ActionFailed(f"{action.action_type} action {action.id}: {message}")

    async def _resolve_assignee(
        self, action: WorkflowActionEntity, tenant_id: str
    ) -> str | None:
        """Direct user, else role lookup, else unassigned."""
        if action.assigned_to_user_id:
            return action.assigned_to_user_id
        if action.assigned_to_role and self._role_resolver is not None:
            return await self._role_resolver.resolve_user_id(
                tenant_id, action.assigned_to_role
            )
        return None

    async def _create_task(
        self,
        action: WorkflowActionEntity,
        subject: TriggerSubject,
        context: ActionContext,
    ) -> ActionSucceeded:
        tenant_id = context.tenant_config.tenant_id
        if not action.task_template_id:
            raise ActionExecutionException(
                action.action_type, "create_task action requires task_template_id"
            )
        template = await self._template_repo.get_by_id_and_tenant(
            action.task_template_id, tenant_id
        )
        if template is None:
            raise ActionExecutionException(
                action.action_type, f"Task template not found: {action.task_template_id}"
            )
        if not template.enabled:
            raise ActionExecutionException(
                action.action_type, f"Task template is disabled: {template.id}"
            )

        offset = (
            action.due_offset_days
            if action.due_offset_days is not None
            else template.due_offset_days
        )
        due_date = due_date_for(offset, subject, context.today)
        placeholders = build_placeholder_context(
            subject,
            workflow_name=context.workflow.name,
            today=context.today,
            days_before=context.days_before,
            due_date=due_date,
        )
        assignee = await self._resolve_assignee(action, tenant_id)
        task = await self._task_repo.create_task(
            tenant_id,
            TaskCreate(
                title=self._renderer.render(template.default_title, placeholders) or template.name,
                description=self._renderer.render(template.default_description, placeholders),
                priority=template.default_priority or context.tenant_config.default_task_priority,
                status=context.tenant_config.default_task_status,
                due_date=due_date,
                assigned_to_user_id=assignee,
                created_by=context.user_id or assignee,
                entity_type=subject.entity_type.value,
                entity_id=subject.id,
                task_type=template.task_type,
                department=template.department,
                auto_created=True,
                workflow_id=context.workflow.id,
                workflow_action_id=action.id,
            ),
        )
        return ActionSucceeded(artifact_id=task.id, artifact_type="task")

    async def _assign_task(
        self,
        action: WorkflowActionEntity,
        subject: TriggerSubject,
        context: ActionContext,
    ) -> ActionSucceeded:
        if subject.entity_type != TriggerEntityType.TASK:
            raise ActionExecutionException(
                action.action_type, "assign_task only applies to task triggers"
            )
        tenant_id = context.tenant_config.tenant_id
        assignee = await self._resolve_assignee(action, tenant_id)
        if assignee is None:
            raise ActionExecutionException(
                action.action_type, "assign_task could not resolve an assignee"
            )
        task = await self._task_repo.assign(subject.id, tenant_id, assignee)
        if task is None:
            raise ActionExecutionException(action.action_type, f"Task not found: {subject.id}")
        return ActionSucceeded(artifact_id=task.id, artifact_type="task_assignment")

    async def _send_notification(
        self,
        action: WorkflowActionEntity,
        subject: TriggerSubject,
        context: ActionContext,
    ) -> ActionSucceeded:
        tenant_id = context.tenant_config.tenant_id
        recipient = await self._resolve_assignee(action, tenant_id)
        if recipient is None:
            raise ActionExecutionException(
                action.action_type,
                "send_notification requires assigned_to_user_id or a resolvable role",
            )
        config = action.config or {}
        placeholders = build_placeholder_context(
            subject,
            workflow_name=context.workflow.name,
            today=context.today,
            days_before=context.days_before,
        )
        priority = config.get("priority")
        if priority not in NotificationPriority.values():
            priority = NotificationPriority.NORMAL.value
        notification_id = await self._notification_repo.create_notification(
            tenant_id,
            recipient,
            self._renderer.render(config.get("title") or context.workflow.name, placeholders)
            or context.workflow.name,
            message=self._renderer.render(config.get("message"), placeholders),
            priority=priority,
            link=subject.link,
            workflow_id=context.workflow.id,
            entity_type=subject.entity_type.value,
            entity_id=subject.id,
        )
        return ActionSucceeded(artifact_id=notification_id, artifact_type="notification")
