"""Workflow execution repository integration tests. Require Postgres; session is rolled back after each test."""

import uuid

import pytest

from app.application.dtos.workflow import WorkflowActionCreate
from app.domain.enums import TenantStatus
from app.infrastructure.persistence.database import set_tenant_context
from app.infrastructure.persistence.models.tenant import Tenant
from app.infrastructure.persistence.repositories.tenant_repo import TenantRepository
from app.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowExecutionRepository,
    WorkflowRepository,
)
from app.shared.utils.datetime import utc_now


async def _tenant_and_workflow(db_session) -> tuple[str, str]:
    code = f"it-{uuid.uuid4().hex[:12]}"
    tenant = Tenant(code=code, name=f"Integration {code}", status=TenantStatus.ACTIVE.value)
    db_session.add(tenant)
    await db_session.flush()
    await set_tenant_context(db_session, tenant.id)
    created = await WorkflowRepository(db_session).create_workflow(
        tenant.id,
        "Notify owner",
        "task_created",
        [WorkflowActionCreate(action_type="send_notification", assigned_to_user_id="u1")],
    )
    return tenant.id, created.id


async def _claim(repo: WorkflowExecutionRepository, tenant_id: str, workflow_id: str):
    return await repo.claim(
        tenant_id=tenant_id,
        workflow_id=workflow_id,
        trigger_type="task_created",
        trigger_entity_type="task",
        trigger_entity_id="task-1",
        dedup_key="created",
        started_at=utc_now(),
    )


@pytest.mark.requires_db
async def test_second_claim_for_same_window_loses(db_session) -> None:
    """The unique dedup index lets exactly one claim win."""
    tenant_id, workflow_id = await _tenant_and_workflow(db_session)
    repo = WorkflowExecutionRepository(db_session)

    first = await _claim(repo, tenant_id, workflow_id)
    second = await _claim(repo, tenant_id, workflow_id)

    assert first is not None
    assert second is None
    assert await repo.exists_for_window(tenant_id, workflow_id, "task-1", "created")


@pytest.mark.requires_db
async def test_released_key_allows_new_claim(db_session) -> None:
    """A failed run that releases its key stays for audit and frees the window."""
    tenant_id, workflow_id = await _tenant_and_workflow(db_session)
    repo = WorkflowExecutionRepository(db_session)
    first = await _claim(repo, tenant_id, workflow_id)

    record = await repo.finalize(
        first.execution_id,
        tenant_id,
        status="failed",
        completed_at=utc_now(),
        actions_executed=1,
        actions_successful=0,
        actions_failed=1,
        created_task_ids=[],
        created_artifact_ids=[],
        warnings=["send_notification action a1: boom"],
        release_dedup_key=True,
    )

    assert record.dedup_key is None
    assert record.warnings == ("send_notification action a1: boom",)
    assert not await repo.exists_for_window(tenant_id, workflow_id, "task-1", "created")
    assert await _claim(repo, tenant_id, workflow_id) is not None
    assert len(await repo.list_by_workflow(workflow_id, tenant_id)) == 2


@pytest.mark.requires_db
async def test_skipped_run_is_audited_once_per_window(db_session) -> None:
    """Repeated skips in one window leave a single skipped row."""
    tenant_id, workflow_id = await _tenant_and_workflow(db_session)
    repo = WorkflowExecutionRepository(db_session)

    async def skip():
        return await repo.record_skipped(
            tenant_id=tenant_id,
            workflow_id=workflow_id,
            trigger_type="task_created",
            trigger_entity_type="task",
            trigger_entity_id="task-1",
            dedup_key="skipped:created",
            now=utc_now(),
            reason="Workflow conditions not met",
        )

    first = await skip()
    assert first is not None
    assert first.status == "skipped"
    assert await skip() is None
    (record,) = await repo.list_by_workflow(workflow_id, tenant_id)
    assert record.id == first.id
    assert record.warnings == ("Workflow conditions not met",)
    # The skipped key does not hold the run window.
    assert await _claim(repo, tenant_id, workflow_id) is not None


@pytest.mark.requires_db
async def test_active_tenants_include_new_tenant(db_session) -> None:
    """get_all_active pages through active tenants."""
    tenant_id, _ = await _tenant_and_workflow(db_session)
    tenants = await TenantRepository(db_session).get_all_active(batch_size=1)
    assert tenant_id in {t.id for t in tenants}
