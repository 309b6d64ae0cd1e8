"""WorkflowAdminService unit tests (definition validation, update allow-list, delete)."""

from unittest.mock import ANY, AsyncMock

import pytest

from app.application.dtos.workflow import WorkflowActionCreate
from app.application.use_cases.workflows import WorkflowAdminService, WorkflowDefinition
from app.domain.exceptions import (
    ResourceNotFoundException,
    ValidationException,
    WorkflowConfigurationException,
)
from tests.factories import action, task_template, workflow

CREATE_TASK = WorkflowActionCreate(action_type="create_task", task_template_id="tpl1")


@pytest.fixture
def admin_mocks():
    """Admin service with mocked workflow and template repos."""
    workflow_repo = AsyncMock()
    workflow_repo.create_workflow = AsyncMock(return_value=workflow())
    workflow_repo.update_workflow = AsyncMock(return_value=workflow())
    workflow_repo.get_entity = AsyncMock(return_value=workflow())
    workflow_repo.soft_delete = AsyncMock(return_value=True)
    template_repo = AsyncMock()
    template_repo.get_by_id_and_tenant = AsyncMock(return_value=task_template())
    return WorkflowAdminService(workflow_repo, template_repo), workflow_repo, template_repo


def _definition(**overrides) -> WorkflowDefinition:
    values = {
        "name": "Event prep",
        "trigger_type": "event_date_approaching",
        "trigger_config": {"days_before": 3},
        "actions": [CREATE_TASK],
    }
    values.update(overrides)
    return WorkflowDefinition(**values)


async def test_create_valid_definition(admin_mocks) -> None:
    """A valid definition is persisted with the caller as creator."""
    service, workflow_repo, _ = admin_mocks
    created = await service.create("t1", _definition(), created_by="u1")
    assert created.id == "wf1"
    workflow_repo.create_workflow.assert_awaited_once_with(
        "t1",
        "Event prep",
        "event_date_approaching",
        [CREATE_TASK],
        description=None,
        trigger_config={"days_before": 3},
        conditions=[],
        event_type_ids=[],
        is_active=True,
        created_by="u1",
    )


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"trigger_type": "deal_won"}, "trigger_type"),
        ({"trigger_config": {"days_before": -1}}, "trigger_config.days_before"),
        ({"conditions": [{"field": "event.status", "operator": "bogus"}]}, "conditions"),
        ({"actions": []}, "actions"),
        (
            {
                "actions": [
                    WorkflowActionCreate(action_type="create_task", task_template_id="tpl1", execution_order=1),
                    WorkflowActionCreate(action_type="create_task", task_template_id="tpl1", execution_order=1),
                ]
            },
            "actions",
        ),
        ({"actions": [WorkflowActionCreate(action_type="create_task")]}, "actions[0].task_template_id"),
        ({"actions": [WorkflowActionCreate(action_type="send_notification")]}, "actions[0]"),
        ({"actions": [WorkflowActionCreate(action_type="send_sms")]}, "actions[0].action_type"),
        ({"trigger_type": "event_created", "trigger_config": {}}, "event_type_ids"),
    ],
)
async def test_create_rejects_invalid_definitions(admin_mocks, overrides, field) -> None:
    """Each invalid part is reported with the field it concerns."""
    service, workflow_repo, _ = admin_mocks
    with pytest.raises(WorkflowConfigurationException) as exc_info:
        await service.create("t1", _definition(**overrides))
    assert exc_info.value.error_code == "WORKFLOW_CONFIGURATION_ERROR"
    assert exc_info.value.details["field"] == field
    workflow_repo.create_workflow.assert_not_awaited()


async def test_create_rejects_template_of_other_tenant(admin_mocks) -> None:
    """Templates are looked up within the tenant."""
    service, _, template_repo = admin_mocks
    template_repo.get_by_id_and_tenant = AsyncMock(return_value=None)
    with pytest.raises(WorkflowConfigurationException, match="Task template not found"):
        await service.create("t1", _definition())
    template_repo.get_by_id_and_tenant.assert_awaited_once_with("tpl1", "t1")


async def test_task_trigger_needs_no_days_before(admin_mocks) -> None:
    """Only date triggers require days_before."""
    service, workflow_repo, _ = admin_mocks
    await service.create("t1", _definition(trigger_type="task_created", trigger_config={}))
    workflow_repo.create_workflow.assert_awaited_once()


async def test_event_created_definition_keeps_event_types(admin_mocks) -> None:
    """event_created needs no days_before; its event types are persisted."""
    service, workflow_repo, _ = admin_mocks
    await service.create(
        "t1", _definition(trigger_type="event_created", trigger_config={}, event_type_ids=["gala"])
    )
    assert workflow_repo.create_workflow.await_args.kwargs["event_type_ids"] == ["gala"]


async def test_update_cannot_clear_event_types_of_event_created(admin_mocks) -> None:
    service, workflow_repo, _ = admin_mocks
    workflow_repo.get_entity = AsyncMock(
        return_value=workflow(trigger_type="event_created", event_type_ids=("gala",))
    )
    with pytest.raises(WorkflowConfigurationException) as exc_info:
        await service.update("wf1", "t1", {"event_type_ids": []})
    assert exc_info.value.details["field"] == "event_type_ids"
    workflow_repo.update_workflow.assert_not_awaited()


async def test_update_rejects_unknown_fields(admin_mocks) -> None:
    """Only allow-listed columns can be patched."""
    service, workflow_repo, _ = admin_mocks
    with pytest.raises(ValidationException, match="tenant_id"):
        await service.update("wf1", "t1", {"tenant_id": "t2", "name": "x"})
    workflow_repo.update_workflow.assert_not_awaited()


async def test_update_validates_merged_definition(admin_mocks) -> None:
    """Switching to a date trigger without days_before is rejected."""
    service, workflow_repo, _ = admin_mocks
    workflow_repo.get_entity = AsyncMock(
        return_value=workflow(trigger_type="task_created", actions=(action(),))
    )
    with pytest.raises(WorkflowConfigurationException):
        await service.update("wf1", "t1", {"trigger_type": "event_date_approaching"})


async def test_update_keeps_actions_when_not_given(admin_mocks) -> None:
    """Column-only updates leave the action list alone."""
    service, workflow_repo, _ = admin_mocks
    await service.update("wf1", "t1", {"name": "Renamed"}, updated_by="u1")
    workflow_repo.update_workflow.assert_awaited_once_with(
        "wf1", "t1", {"name": "Renamed"}, actions=None, updated_by="u1"
    )


async def test_update_missing_workflow(admin_mocks) -> None:
    """Unknown or other-tenant workflows are not found."""
    service, workflow_repo, _ = admin_mocks
    workflow_repo.get_entity = AsyncMock(return_value=None)
    with pytest.raises(ResourceNotFoundException):
        await service.update("nope", "t1", {"name": "x"})


async def test_delete(admin_mocks) -> None:
    """Soft delete records who deleted the workflow; missing ones raise."""
    service, workflow_repo, _ = admin_mocks
    await service.delete("wf1", "t1", deleted_by="u1")
    workflow_repo.soft_delete.assert_awaited_once_with("wf1", "t1", deleted_by="u1", now=ANY)

    workflow_repo.soft_delete = AsyncMock(return_value=False)
    with pytest.raises(ResourceNotFoundException):
        await service.delete("wf1", "t1")
