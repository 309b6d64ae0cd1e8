"""Builders and in-memory fakes shared by the workflow tests."""

from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import Any

from app.application.dtos.event import EventResult
from app.application.dtos.task import TaskResult, TaskTemplateResult
from app.application.dtos.workflow import ExecutionClaim, ExecutionRecord
from app.domain.entities.subject import TriggerSubject
from app.domain.entities.tenant import TenantConfig
from app.domain.entities.workflow import WorkflowActionEntity, WorkflowEntity
from app.shared.enums import TriggerEntityType, WorkflowExecutionStatus

NOW = datetime(2025, 3, 10, 12, 0, 0, tzinfo=timezone.utc)
TENANT_ID = "t1"


def tenant_config(timezone_name: str = "UTC", tenant_id: str = TENANT_ID) -> TenantConfig:
    return TenantConfig(tenant_id=tenant_id, name="Acme", timezone=timezone_name)


def event_subject(
    event_id: str = "ev1",
    *,
    start: date | None = date(2025, 3, 13),
    status: str = "scheduled",
    tenant_id: str = TENANT_ID,
    **attributes: Any,
) -> TriggerSubject:
    return TriggerSubject(
        entity_type=TriggerEntityType.EVENT,
        id=event_id,
        tenant_id=tenant_id,
        title="Annual gala",
        status=status,
        relevant_dates=(start,) if start else (),
        attributes={
            "id": event_id,
            "title": "Annual gala",
            "status": status,
            "start_date": start,
            **attributes,
        },
    )


def event_result(
    event_id: str = "ev1",
    *,
    title: str = "Annual gala",
    start: date | None = date(2025, 3, 13),
    status: str = "scheduled",
    event_type_id: str | None = "gala",
) -> EventResult:
    return EventResult(
        id=event_id,
        tenant_id=TENANT_ID,
        title=title,
        description=None,
        status=status,
        start_date=start,
        end_date=None,
        event_date=None,
        account_id=None,
        event_type_id=event_type_id,
        created_at=NOW,
        updated_at=NOW,
    )


def task_result(
    task_id: str = "task1",
    *,
    status: str = "pending",
    auto_created: bool = False,
    task_type: str | None = None,
    department: str | None = None,
    due_date: date | None = None,
) -> TaskResult:
    return TaskResult(
        id=task_id,
        tenant_id=TENANT_ID,
        title="Call the venue",
        description=None,
        priority="medium",
        status=status,
        due_date=due_date,
        assigned_to_user_id=None,
        created_by="u1",
        entity_type=None,
        entity_id=None,
        task_type=task_type,
        department=department,
        auto_created=auto_created,
        workflow_id=None,
        workflow_action_id=None,
        workflow_execution_id=None,
        created_at=NOW,
        updated_at=NOW,
    )


def task_template(
    template_id: str = "tpl1",
    *,
    title: str = "Prepare {{event_title}}",
    enabled: bool = True,
    due_offset_days: int | None = -1,
) -> TaskTemplateResult:
    return TaskTemplateResult(
        id=template_id,
        tenant_id=TENANT_ID,
        name="Prep",
        default_title=title,
        default_description="{{days_before}} days before {{entity_title}}",
        default_priority="high",
        due_offset_days=due_offset_days,
        task_type="prep",
        department="ops",
        enabled=enabled,
    )


def action(
    action_id: str = "a1",
    action_type: str = "create_task",
    execution_order: int = 0,
    **fields: Any,
) -> WorkflowActionEntity:
    fields.setdefault("task_template_id", "tpl1" if action_type == "create_task" else None)
    return WorkflowActionEntity(
        id=action_id,
        workflow_id="wf1",
        action_type=action_type,
        execution_order=execution_order,
        **fields,
    )


def workflow(
    workflow_id: str = "wf1",
    *,
    trigger_type: str = "event_date_approaching",
    trigger_config: dict[str, Any] | None = None,
    conditions: list[dict[str, Any]] | None = None,
    actions: tuple[WorkflowActionEntity, ...] | None = None,
    is_active: bool = True,
    tenant_id: str = TENANT_ID,
    event_type_ids: tuple[str, ...] = (),
) -> WorkflowEntity:
    if trigger_config is None:
        trigger_config = {"days_before": 3} if trigger_type == "event_date_approaching" else {}
    return WorkflowEntity(
        id=workflow_id,
        tenant_id=tenant_id,
        name="Event prep",
        trigger_type=trigger_type,
        trigger_config=trigger_config,
        conditions=conditions or [],
        event_type_ids=event_type_ids,
        actions=actions if actions is not None else (action(),),
        is_active=is_active,
    )


def claim(dedup_key: str = "2025-03-10") -> ExecutionClaim:
    return ExecutionClaim(
        execution_id="ex1",
        tenant_id=TENANT_ID,
        workflow_id="wf1",
        trigger_type="event_date_approaching",
        trigger_entity_type="event",
        trigger_entity_id="ev1",
        dedup_key=dedup_key,
        started_at=NOW,
    )


def execution_record(
    status: str = WorkflowExecutionStatus.COMPLETED.value, **fields: Any
) -> ExecutionRecord:
    values: dict[str, Any] = {
        "id": "ex1",
        "tenant_id": TENANT_ID,
        "workflow_id": "wf1",
        "trigger_type": "event_date_approaching",
        "trigger_entity_type": "event",
        "trigger_entity_id": "ev1",
        "dedup_key": "2025-03-10",
        "status": status,
        "started_at": NOW,
        "completed_at": NOW,
        "actions_executed": 1,
        "actions_successful": 1,
        "actions_failed": 0,
    }
    values.update(fields)
    return ExecutionRecord(**values)


class FakeSession:
    """Stands in for AsyncSession where only SAVEPOINTs are used."""

    def __init__(self) -> None:
        self.savepoints = 0
        self.rolled_back = 0

    @asynccontextmanager
    async def begin_nested(self):
        self.savepoints += 1
        try:
            yield self
        except Exception:
            self.rolled_back += 1
            raise
