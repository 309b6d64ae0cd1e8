"""Workflow and WorkflowExecution repositories."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.workflow import (
    ExecutionClaim,
    ExecutionRecord,
    WorkflowActionCreate,
)
from app.domain.entities.workflow import WorkflowActionEntity, WorkflowEntity
from app.domain.exceptions import ResourceNotFoundException
from app.infrastructure.persistence.models.workflow import (
    Workflow,
    WorkflowAction,
    WorkflowExecution,
)
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.enums import WorkflowExecutionStatus
from app.shared.utils.generators import generate_cuid


def _json_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _json_dict(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, dict) else {}


def _action_to_entity(a: WorkflowAction) -> WorkflowActionEntity:
    return WorkflowActionEntity(
        id=a.id,
        workflow_id=a.workflow_id,
        action_type=a.action_type,
        execution_order=a.execution_order,
        task_template_id=a.task_template_id,
        assigned_to_user_id=a.assigned_to_user_id,
        assigned_to_role=a.assigned_to_role,
        due_offset_days=a.due_offset_days,
        config=_json_dict(a.config),
    )


def _to_entity(w: Workflow) -> WorkflowEntity:
    """Map Workflow ORM (actions loaded) to the domain entity."""
    return WorkflowEntity(
        id=w.id,
        tenant_id=w.tenant_id,
        name=w.name,
        description=w.description,
        trigger_type=w.trigger_type,
        trigger_config=_json_dict(w.trigger_config),
        conditions=_json_list(w.conditions),
        event_type_ids=tuple(str(t) for t in _json_list(w.event_type_ids)),
        actions=tuple(
            _action_to_entity(a)
            for a in sorted(w.actions, key=lambda a: (a.execution_order, a.id))
        ),
        is_active=w.is_active,
        created_at=w.created_at,
    )


def _build_actions(
    tenant_id: str, actions: Sequence[WorkflowActionCreate]
) -> list[WorkflowAction]:
    return [
        WorkflowAction(
            tenant_id=tenant_id,
            action_type=a.action_type,
            execution_order=a.execution_order if a.execution_order is not None else index,
            task_template_id=a.task_template_id,
            assigned_to_user_id=a.assigned_to_user_id,
            assigned_to_role=a.assigned_to_role,
            due_offset_days=a.due_offset_days,
            config=dict(a.config or {}),
        )
        for index, a in enumerate(actions)
    ]


def _execution_to_record(e: WorkflowExecution) -> ExecutionRecord:
    return ExecutionRecord(
        id=e.id,
        tenant_id=e.tenant_id,
        workflow_id=e.workflow_id,
        trigger_type=e.trigger_type,
        trigger_entity_type=e.trigger_entity_type,
        trigger_entity_id=e.trigger_entity_id,
        dedup_key=e.dedup_key,
        status=e.status,
        started_at=e.started_at,
        completed_at=e.completed_at,
        actions_executed=e.actions_executed,
        actions_successful=e.actions_successful,
        actions_failed=e.actions_failed,
        created_task_ids=tuple(_json_list(e.created_task_ids)),
        created_artifact_ids=tuple(_json_list(e.created_artifact_ids)),
        warnings=tuple(str(w) for w in _json_list(e.warnings)),
        created_at=e.created_at,
    )


class WorkflowRepository(BaseRepository[Workflow]):
    """Workflow repository. Implements IWorkflowRepository plus admin writes."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Workflow)

    async def get_active_by_trigger(
        self, tenant_id: str, trigger_type: str
    ) -> list[WorkflowEntity]:
        result = await self.db.execute(
            select(Workflow)
            .where(
                Workflow.tenant_id == tenant_id,
                Workflow.trigger_type == trigger_type,
                Workflow.is_active.is_(True),
                Workflow.deleted_at.is_(None),
            )
            .order_by(Workflow.created_at.asc(), Workflow.id.asc())
        )
        return [_to_entity(w) for w in result.scalars().all()]

    async def get_entity(
        self, workflow_id: str, tenant_id: str
    ) -> WorkflowEntity | None:
        workflow = await self.get_model_in_tenant(workflow_id, tenant_id)
        return _to_entity(workflow) if workflow else None

    async def get_by_tenant(
        self,
        tenant_id: str,
        skip: int = 0,
        limit: int = 100,
        include_inactive: bool = False,
    ) -> list[WorkflowEntity]:
        q = select(Workflow).where(
            Workflow.tenant_id == tenant_id,
            Workflow.deleted_at.is_(None),
        )
        if not include_inactive:
            q = q.where(Workflow.is_active.is_(True))
        q = q.order_by(Workflow.created_at.asc(), Workflow.id.asc()).offset(skip).limit(limit)
        result = await self.db.execute(q)
        return [_to_entity(w) for w in result.scalars().all()]

    async def create_workflow(
        self,
        tenant_id: str,
        name: str,
        trigger_type: str,
        actions: Sequence[WorkflowActionCreate],
        *,
        description: str | None = None,
        trigger_config: dict[str, Any] | None = None,
        conditions: list[dict[str, Any]] | None = None,
        event_type_ids: list[str] | None = None,
        is_active: bool = True,
        created_by: str | None = None,
    ) -> WorkflowEntity:
        """Create workflow with its actions; return created entity."""
        workflow = Workflow(
            tenant_id=tenant_id,
            name=name,
            description=description,
            is_active=is_active,
            trigger_type=trigger_type,
            trigger_config=trigger_config or {},
            conditions=conditions or [],
            event_type_ids=event_type_ids or None,
            created_by=created_by,
            actions=_build_actions(tenant_id, actions),
        )
        return _to_entity(await self.create(workflow))

    async def update_workflow(
        self,
        workflow_id: str,
        tenant_id: str,
        changes: dict[str, Any],
        *,
        actions: Sequence[WorkflowActionCreate] | None = None,
        updated_by: str | None = None,
    ) -> WorkflowEntity:
        """Apply allow-listed column changes and optionally replace the action list."""
        workflow = await self.get_model_in_tenant(workflow_id, tenant_id)
        if workflow is None:
            raise ResourceNotFoundException("workflow", workflow_id)
        for column, value in changes.items():
            setattr(workflow, column, value)
        workflow.updated_by = updated_by
        if actions is not None:
            # Orphans must be deleted before new rows reuse their execution_order.
            workflow.actions.clear()
            await self.db.flush()
            workflow.actions.extend(_build_actions(tenant_id, actions))
        return _to_entity(await self.update(workflow))

    async def soft_delete(
        self, workflow_id: str, tenant_id: str, *, deleted_by: str | None, now: datetime
    ) -> bool:
        workflow = await self.get_model_in_tenant(workflow_id, tenant_id)
        if workflow is None:
            return False
        workflow.deleted_at = now
        workflow.deleted_by = deleted_by
        workflow.is_active = False
        await self.update(workflow)
        return True


class WorkflowExecutionRepository(BaseRepository[WorkflowExecution]):
    """Execution record repository. Implements IWorkflowExecutionRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, WorkflowExecution)

    async def exists_for_window(
        self,
        tenant_id: str,
        workflow_id: str,
        trigger_entity_id: str,
        dedup_key: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> bool:
        q = select(WorkflowExecution.id).where(
            WorkflowExecution.tenant_id == tenant_id,
            WorkflowExecution.workflow_id == workflow_id,
            WorkflowExecution.trigger_entity_id == trigger_entity_id,
            WorkflowExecution.dedup_key == dedup_key,
        )
        if start is not None and end is not None:
            q = q.where(
                WorkflowExecution.created_at >= start,
                WorkflowExecution.created_at < end,
            )
        result = await self.db.execute(q.limit(1))
        return result.scalar_one_or_none() is not None

    async def _insert_if_absent(self, values: dict[str, Any]) -> bool:
        """INSERT ... ON CONFLICT DO NOTHING RETURNING id on the dedup index."""
        stmt = (
            pg_insert(WorkflowExecution)
            .values(**values)
            .on_conflict_do_nothing(
                index_elements=[
                    WorkflowExecution.tenant_id,
                    WorkflowExecution.workflow_id,
                    WorkflowExecution.trigger_entity_id,
                    WorkflowExecution.dedup_key,
                ]
            )
            .returning(WorkflowExecution.id)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def claim(
        self,
        *,
        tenant_id: str,
        workflow_id: str,
        trigger_type: str,
        trigger_entity_type: str,
        trigger_entity_id: str,
        dedup_key: str,
        started_at: datetime,
    ) -> ExecutionClaim | None:
        execution_id = generate_cuid()
        inserted = await self._insert_if_absent(
            {
                "id": execution_id,
                "tenant_id": tenant_id,
                "workflow_id": workflow_id,
                "trigger_type": trigger_type,
                "trigger_entity_type": trigger_entity_type,
                "trigger_entity_id": trigger_entity_id,
                "dedup_key": dedup_key,
                "status": WorkflowExecutionStatus.RUNNING.value,
                "started_at": started_at,
                "created_at": started_at,
                "actions_executed": 0,
                "actions_successful": 0,
                "actions_failed": 0,
                "created_task_ids": [],
                "created_artifact_ids": [],
                "warnings": [],
            }
        )
        if not inserted:
            return None
        return ExecutionClaim(
            execution_id=execution_id,
            tenant_id=tenant_id,
            workflow_id=workflow_id,
            trigger_type=trigger_type,
            trigger_entity_type=trigger_entity_type,
            trigger_entity_id=trigger_entity_id,
            dedup_key=dedup_key,
            started_at=started_at,
        )

    async def finalize(
        self,
        execution_id: str,
        tenant_id: str,
        *,
        status: str,
        completed_at: datetime,
        actions_executed: int,
        actions_successful: int,
        actions_failed: int,
        created_task_ids: list[str],
        created_artifact_ids: list[str],
        warnings: list[str],
        release_dedup_key: bool = False,
    ) -> ExecutionRecord:
        execution = await self.get_model_in_tenant(execution_id, tenant_id)
        if execution is None:
            raise ResourceNotFoundException("workflow_execution", execution_id)
        execution.status = status
        execution.completed_at = completed_at
        execution.actions_executed = actions_executed
        execution.actions_successful = actions_successful
        execution.actions_failed = actions_failed
        execution.created_task_ids = list(created_task_ids)
        execution.created_artifact_ids = list(created_artifact_ids)
        execution.warnings = list(warnings)
        if release_dedup_key:
            execution.dedup_key = None
        return _execution_to_record(await self.update(execution))

    async def record_skipped(
        self,
        *,
        tenant_id: str,
        workflow_id: str,
        trigger_type: str,
        trigger_entity_type: str,
        trigger_entity_id: str,
        dedup_key: str,
        now: datetime,
        reason: str,
    ) -> ExecutionRecord | None:
        """Skipped audit row, once per dedup_key; None when the window is already audited."""
        record = ExecutionRecord(
            id=generate_cuid(),
            tenant_id=tenant_id,
            workflow_id=workflow_id,
            trigger_type=trigger_type,
            trigger_entity_type=trigger_entity_type,
            trigger_entity_id=trigger_entity_id,
            dedup_key=dedup_key,
            status=WorkflowExecutionStatus.SKIPPED.value,
            started_at=now,
            completed_at=now,
            actions_executed=0,
            actions_successful=0,
            actions_failed=0,
            warnings=(reason,),
            created_at=now,
        )
        values = asdict(record)
        for column in ("created_task_ids", "created_artifact_ids", "warnings"):
            values[column] = list(values[column])
        if not await self._insert_if_absent(values):
            return None
        return record

    async def list_by_workflow(
        self, workflow_id: str, tenant_id: str, skip: int = 0, limit: int = 100
    ) -> list[ExecutionRecord]:
        result = await self.db.execute(
            select(WorkflowExecution)
            .where(
                WorkflowExecution.tenant_id == tenant_id,
                WorkflowExecution.workflow_id == workflow_id,
            )
            .order_by(WorkflowExecution.created_at.desc(), WorkflowExecution.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return [_execution_to_record(e) for e in result.scalars().all()]

    async def get_record(
        self, execution_id: str, tenant_id: str
    ) -> ExecutionRecord | None:
        execution = await self.get_model_in_tenant(execution_id, tenant_id)
        return _execution_to_record(execution) if execution else None
