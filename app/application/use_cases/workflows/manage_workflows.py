"""Workflow administration: validated create, allow-listed update, soft delete."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from app.application.dtos.workflow import WorkflowActionCreate
from app.application.services.condition_evaluator import validate_conditions
from app.application.services.trigger_matcher import valid_days_before
from app.domain.exceptions import (
    ResourceNotFoundException,
    ValidationException,
    WorkflowConfigurationException,
)
from app.shared.enums import WorkflowActionType, WorkflowTriggerType
from app.shared.utils.datetime import utc_now

if TYPE_CHECKING:
    from app.application.interfaces.repositories import (
        ITaskTemplateRepository,
        IWorkflowRepository,
    )
    from app.domain.entities.workflow import WorkflowEntity

# Columns a PATCH may change; anything else is rejected before the data layer.
UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "description",
        "is_active",
        "trigger_type",
        "trigger_config",
        "conditions",
        "event_type_ids",
    }
)


@dataclass(frozen=True)
class WorkflowDefinition:
    """Workflow to create."""

    name: str
    trigger_type: str
    actions: list[WorkflowActionCreate]
    description: str | None = None
    trigger_config: dict[str, Any] = field(default_factory=dict)
    conditions: list[dict[str, Any]] = field(default_factory=list)
    event_type_ids: list[str] = field(default_factory=list)
    is_active: bool = True


class WorkflowAdminService:
    """Tenant-scoped workflow CRUD with definition validation."""

    def __init__(
        self,
        workflow_repo: IWorkflowRepository,
        template_repo: ITaskTemplateRepository,
    ) -> None:
        self._workflow_repo = workflow_repo
        self._template_repo = template_repo

    async def validate_definition(
        self,
        tenant_id: str,
        trigger_type: str,
        trigger_config: dict[str, Any] | None,
        conditions: Any,
        actions: Sequence[WorkflowActionCreate],
        event_type_ids: Sequence[str] | None = None,
    ) -> None:
        """Raise WorkflowConfigurationException on the first invalid part."""
        if trigger_type not in WorkflowTriggerType.values():
            raise WorkflowConfigurationException(
                f"Unsupported trigger type: {trigger_type}", field="trigger_type"
            )
        if (
            trigger_type == WorkflowTriggerType.EVENT_DATE_APPROACHING.value
            and valid_days_before(trigger_config) is None
        ):
            raise WorkflowConfigurationException(
                "event_date_approaching requires trigger_config.days_before (integer >= 0)",
                field="trigger_config.days_before",
            )
        if trigger_type == WorkflowTriggerType.EVENT_CREATED.value and not event_type_ids:
            raise WorkflowConfigurationException(
                "event_created requires at least one event type", field="event_type_ids"
            )
        problems = validate_conditions(conditions)
        if problems:
            raise WorkflowConfigurationException("; ".join(problems), field="conditions")
        if not actions:
            raise WorkflowConfigurationException(
                "A workflow needs at least one action", field="actions"
            )
        orders = [a.execution_order for a in actions if a.execution_order is not None]
        if len(orders) != len(set(orders)):
            raise WorkflowConfigurationException(
                "Action execution_order values must be unique", field="actions"
            )
        for index, action in enumerate(actions):
            await self._validate_action(tenant_id, index, action)

    async def _validate_action(
        self, tenant_id: str, index: int, action: WorkflowActionCreate
    ) -> None:
        where = f"actions[{index}]"
        match action.action_type:
            case WorkflowActionType.CREATE_TASK.value:
                if not action.task_template_id:
                    raise WorkflowConfigurationException(
                        "create_task requires task_template_id", field=f"{where}.task_template_id"
                    )
                template = await self._template_repo.get_by_id_and_tenant(
                    action.task_template_id, tenant_id
                )
                if template is None:
                    raise WorkflowConfigurationException(
                        f"Task template not found: {action.task_template_id}",
                        field=f"{where}.task_template_id",
                    )
            case WorkflowActionType.ASSIGN_TASK.value | WorkflowActionType.SEND_NOTIFICATION.value:
                if not action.assigned_to_user_id and not action.assigned_to_role:
                    raise WorkflowConfigurationException(
                        f"{action.action_type} requires assigned_to_user_id or assigned_to_role",
                        field=where,
                    )
            case _:
                raise WorkflowConfigurationException(
                    f"Unsupported action type: {action.action_type}", field=f"{where}.action_type"
                )

    async def create(
        self, tenant_id: str, definition: WorkflowDefinition, *, created_by: str | None = None
    ) -> WorkflowEntity:
        await self.validate_definition(
            tenant_id,
            definition.trigger_type,
            definition.trigger_config,
            definition.conditions,
            definition.actions,
            definition.event_type_ids,
        )
        return await self._workflow_repo.create_workflow(
            tenant_id,
            definition.name,
            definition.trigger_type,
            definition.actions,
            description=definition.description,
            trigger_config=definition.trigger_config,
            conditions=definition.conditions,
            event_type_ids=definition.event_type_ids,
            is_active=definition.is_active,
            created_by=created_by,
        )

    async def update(
        self,
        workflow_id: str,
        tenant_id: str,
        changes: dict[str, Any],
        *,
        actions: Sequence[WorkflowActionCreate] | None = None,
        updated_by: str | None = None,
    ) -> WorkflowEntity:
        """Apply a partial update; the merged definition must still be valid."""
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationException(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )
        current = await self._workflow_repo.get_entity(workflow_id, tenant_id)
        if current is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        merged_actions = (
            list(actions)
            if actions is not None
            else [
                WorkflowActionCreate(
                    action_type=a.action_type,
                    execution_order=a.execution_order,
                    task_template_id=a.task_template_id,
                    assigned_to_user_id=a.assigned_to_user_id,
                    assigned_to_role=a.assigned_to_role,
                    due_offset_days=a.due_offset_days,
                    config=a.config,
                )
                for a in current.ordered_actions()
            ]
        )
        await self.validate_definition(
            tenant_id,
            changes.get("trigger_type", current.trigger_type),
            changes.get("trigger_config", current.trigger_config),
            changes.get("conditions", current.conditions),
            merged_actions,
            changes.get("event_type_ids", current.event_type_ids),
        )
        return await self._workflow_repo.update_workflow(
            workflow_id, tenant_id, changes, actions=actions, updated_by=updated_by
        )

    async def delete(
        self, workflow_id: str, tenant_id: str, *, deleted_by: str | None = None
    ) -> None:
        deleted = await self._workflow_repo.soft_delete(
            workflow_id, tenant_id, deleted_by=deleted_by, now=utc_now()
        )
        if not deleted:
            raise ResourceNotFoundException("workflow", workflow_id)
