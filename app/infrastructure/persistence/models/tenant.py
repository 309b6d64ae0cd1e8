"""Tenant ORM model. Root entity for multi-tenant hierarchy (no tenant_id)."""

from typing import Any

import sqlalchemy as sa
from sqlalchemy import JSON, CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import TenantStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    CuidMixin,
    TimestampMixin,
    in_values_check,
)


class Tenant(CuidMixin, TimestampMixin, Base):
    """Root tenant entity. Table: tenant. Status: active, suspended, archived.

    timezone is the reference timezone for calendar reasoning ("today",
    event dates, dedup day windows). settings holds per-tenant defaults
    (default_task_priority, default_task_status).
    """

    __tablename__ = "tenant"

    code: Mapped[str] = mapped_column(String, unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=TenantStatus.ACTIVE.value, index=True
    )
    timezone: Mapped[str] = mapped_column(
        String(64), nullable=False, default="UTC", server_default=sa.text("'UTC'")
    )
    settings: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    __table_args__ = (
        CheckConstraint(
            in_values_check("status", TenantStatus.values()),
            name="tenant_status_check",
        ),
    )
