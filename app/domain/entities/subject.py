"""Trigger subject: the record a workflow fires for (CRM event or task).

Independent of persistence. Repositories build subjects from ORM rows;
the matcher, executor and renderer read only this shape.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from app.domain.exceptions import ValidationException
from app.shared.enums import TriggerEntityType


@dataclass(frozen=True)
class TriggerSubject:
    """Snapshot of a trigger subject.

    relevant_dates: calendar dates the subject is scheduled on (events:
    start_date and legacy event_date; tasks: due_date). attributes holds
    every field by name for placeholders and conditions.
    """

    entity_type: TriggerEntityType
    id: str
    tenant_id: str
    title: str
    status: str | None = None
    relevant_dates: tuple[date, ...] = ()
    auto_created: bool = False
    attributes: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValidationException("Subject ID is required", field="id")
        if not self.tenant_id:
            raise ValidationException("Subject must belong to a tenant", field="tenant_id")

    @property
    def earliest_date(self) -> date | None:
        """Earliest relevant date, or None when the subject is undated."""
        return min(self.relevant_dates) if self.relevant_dates else None

    @property
    def link(self) -> str:
        """In-app path of the subject (used by notifications)."""
        return f"/{self.entity_type.value}s/{self.id}"

    def belongs_to_tenant(self, tenant_id: str) -> bool:
        return self.tenant_id == tenant_id

    def with_status(self, status: str) -> "TriggerSubject":
        """Copy with a new status (attributes updated too)."""
        return TriggerSubject(
            entity_type=self.entity_type,
            id=self.id,
            tenant_id=self.tenant_id,
            title=self.title,
            status=status,
            relevant_dates=self.relevant_dates,
            auto_created=self.auto_created,
            attributes={**self.attributes, "status": status},
        )
