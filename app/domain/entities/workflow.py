"""Workflow domain entities.

A workflow is a definition: trigger type, trigger configuration, optional
conditions and an ordered list of actions. Entities are plain snapshots of
persisted rows; the engine never mutates them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class WorkflowActionEntity:
    """One step of a workflow, executed in execution_order."""

    id: str
    workflow_id: str
    action_type: str
    execution_order: int
    task_template_id: str | None = None
    assigned_to_user_id: str | None = None
    assigned_to_role: str | None = None
    due_offset_days: int | None = None
    config: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WorkflowEntity:
    """Domain entity for a workflow definition (trigger + conditions + actions)."""

    id: str
    tenant_id: str
    name: str
    trigger_type: str
    trigger_config: dict[str, Any] = field(default_factory=dict)
    conditions: list[dict[str, Any]] = field(default_factory=list)
    event_type_ids: tuple[str, ...] = ()
    actions: tuple[WorkflowActionEntity, ...] = ()
    is_active: bool = True
    description: str | None = None
    created_at: datetime | None = None

    def belongs_to_tenant(self, tenant_id: str) -> bool:
        """Return whether this workflow belongs to the given tenant."""
        return self.tenant_id == tenant_id

    def ordered_actions(self) -> list[WorkflowActionEntity]:
        """Actions sorted by execution_order (ties keep stored order)."""
        return sorted(self.actions, key=lambda a: a.execution_order)
