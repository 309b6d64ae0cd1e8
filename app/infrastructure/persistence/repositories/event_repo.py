"""CRM event repository: event writes and candidate lookups for event workflows."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.event import EventCreate, EventResult
from app.domain.entities.subject import TriggerSubject
from app.domain.enums import EventStatus
from app.infrastructure.persistence.models.event import Event
from app.infrastructure.persistence.repositories.base import BaseRepository


def _to_result(e: Event) -> EventResult:
    """Map Event ORM to EventResult DTO."""
    return EventResult(
        id=e.id,
        tenant_id=e.tenant_id,
        title=e.title,
        description=e.description,
        status=e.status,
        start_date=e.start_date,
        end_date=e.end_date,
        event_date=e.event_date,
        account_id=e.account_id,
        event_type_id=e.event_type_id,
        created_at=e.created_at,
        updated_at=e.updated_at,
    )


class EventRepository(BaseRepository[Event]):
    """Event repository. Implements IEventRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Event)

    async def create_event(self, tenant_id: str, data: EventCreate) -> EventResult:
        event = Event(
            tenant_id=tenant_id,
            title=data.title,
            description=data.description,
            status=data.status or EventStatus.SCHEDULED.value,
            start_date=data.start_date,
            end_date=data.end_date,
            event_date=data.event_date,
            account_id=data.account_id,
            event_type_id=data.event_type_id,
        )
        return _to_result(await self.create(event))

    async def list_by_target_date(
        self, tenant_id: str, target: date
    ) -> list[TriggerSubject]:
        """Non-cancelled events of the tenant on target (start_date or legacy event_date)."""
        result = await self.db.execute(
            select(Event)
            .where(
                Event.tenant_id == tenant_id,
                or_(Event.start_date == target, Event.event_date == target),
                Event.status != EventStatus.CANCELLED.value,
            )
            .order_by(Event.id)
        )
        return [_to_result(e).to_subject() for e in result.scalars().all()]

    async def list_upcoming_by_types(
        self, tenant_id: str, event_type_ids: Sequence[str], from_date: date
    ) -> list[EventResult]:
        """Non-cancelled events of the given types dated from_date or later, soonest first."""
        if not event_type_ids:
            return []
        day = func.coalesce(Event.start_date, Event.event_date)
        result = await self.db.execute(
            select(Event)
            .where(
                Event.tenant_id == tenant_id,
                Event.event_type_id.in_(list(event_type_ids)),
                Event.status != EventStatus.CANCELLED.value,
                day >= from_date,
            )
            .order_by(day.asc(), Event.id.asc())
        )
        return [_to_result(e) for e in result.scalars().all()]
