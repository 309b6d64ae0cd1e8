"""DTOs for CRM events (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from app.domain.entities.subject import TriggerSubject
from app.shared.enums import TriggerEntityType


@dataclass(frozen=True)
class EventCreate:
    """Fields of a CRM event to insert."""

    title: str
    description: str | None = None
    status: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    event_date: date | None = None
    account_id: str | None = None
    event_type_id: str | None = None


@dataclass(frozen=True)
class EventResult:
    """Persisted CRM event."""

    id: str
    tenant_id: str
    title: str
    description: str | None
    status: str
    start_date: date | None
    end_date: date | None
    event_date: date | None
    account_id: str | None
    event_type_id: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_subject(self) -> TriggerSubject:
        """Trigger subject view (relevant dates: start_date and legacy event_date)."""
        return TriggerSubject(
            entity_type=TriggerEntityType.EVENT,
            id=self.id,
            tenant_id=self.tenant_id,
            title=self.title,
            status=self.status,
            relevant_dates=tuple(d for d in (self.start_date, self.event_date) if d is not None),
            attributes={
                "id": self.id,
                "title": self.title,
                "description": self.description,
                "status": self.status,
                "start_date": self.start_date.isoformat() if self.start_date else None,
                "end_date": self.end_date.isoformat() if self.end_date else None,
                "event_date": self.event_date.isoformat() if self.event_date else None,
                "account_id": self.account_id,
                "event_type_id": self.event_type_id,
            },
        )
