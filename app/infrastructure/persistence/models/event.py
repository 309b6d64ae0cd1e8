"""CRM event ORM model (trigger subject for event workflows)."""

from datetime import date

import sqlalchemy as sa
from sqlalchemy import CheckConstraint, Date, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import EventStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    MultiTenantModel,
    in_values_check,
)


class Event(MultiTenantModel, Base):
    """Scheduled CRM event. Table: crm_event.

    start_date is the canonical date; event_date is the legacy single date
    still populated on older rows. Both are calendar dates in the tenant's
    reference timezone.
    """

    __tablename__ = "crm_event"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=EventStatus.SCHEDULED.value,
        server_default=sa.text("'scheduled'"),
    )
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    event_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    account_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    event_type_id: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        Index("ix_crm_event_tenant_start_date", "tenant_id", "start_date"),
        Index("ix_crm_event_tenant_event_date", "tenant_id", "event_date"),
        Index("ix_crm_event_tenant_event_type", "tenant_id", "event_type_id"),
        CheckConstraint(
            in_values_check("status", EventStatus.values()),
            name="crm_event_status_check",
        ),
    )
