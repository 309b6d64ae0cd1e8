"""Event repository integration tests. Require Postgres; session is rolled back after each test."""

import uuid
from datetime import date

import pytest

from app.application.dtos.event import EventCreate
from app.domain.enums import TenantStatus
from app.infrastructure.persistence.database import set_tenant_context
from app.infrastructure.persistence.models.tenant import Tenant
from app.infrastructure.persistence.repositories.event_repo import EventRepository


async def _tenant(db_session) -> str:
    code = f"it-{uuid.uuid4().hex[:12]}"
    tenant = Tenant(code=code, name=f"Integration {code}", status=TenantStatus.ACTIVE.value)
    db_session.add(tenant)
    await db_session.flush()
    await set_tenant_context(db_session, tenant.id)
    return tenant.id


@pytest.mark.requires_db
async def test_upcoming_events_by_type(db_session) -> None:
    """Only future, non-cancelled events of the listed types, soonest first."""
    tenant_id = await _tenant(db_session)
    repo = EventRepository(db_session)
    later = await repo.create_event(
        tenant_id, EventCreate(title="Expo", start_date=date(2025, 4, 2), event_type_id="gala")
    )
    legacy = await repo.create_event(
        tenant_id, EventCreate(title="Dinner", event_date=date(2025, 3, 20), event_type_id="gala")
    )
    await repo.create_event(
        tenant_id, EventCreate(title="Past", start_date=date(2025, 3, 1), event_type_id="gala")
    )
    await repo.create_event(
        tenant_id,
        EventCreate(
            title="Off", start_date=date(2025, 3, 25), status="cancelled", event_type_id="gala"
        ),
    )
    await repo.create_event(
        tenant_id, EventCreate(title="Talk", start_date=date(2025, 3, 25), event_type_id="webinar")
    )

    upcoming = await repo.list_upcoming_by_types(tenant_id, ["gala"], date(2025, 3, 10))

    assert [e.id for e in upcoming] == [legacy.id, later.id]
    assert legacy.status == "scheduled"
    assert await repo.list_upcoming_by_types(tenant_id, [], date(2025, 3, 10)) == []
