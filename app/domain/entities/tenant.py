"""Tenant domain entities.

TenantEntity carries tenant lifecycle; TenantConfig is the per-tenant
configuration every workflow operation receives by parameter.
"""

from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.domain.enums import TaskPriority, TaskStatus, TenantStatus
from app.domain.exceptions import ValidationException
from app.shared.utils.datetime import get_zone, local_today


@dataclass
class TenantEntity:
    """Domain entity for tenant (SRP: business logic separate from persistence).

    Encapsulates tenant lifecycle (active/suspended/archived). Validation runs
    on construction.
    """

    id: str
    code: str
    name: str
    status: TenantStatus

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate tenant business rules. Raises ValidationException if invalid."""
        if not self.id:
            raise ValidationException("Tenant ID is required", field="id")
        if not self.name or not self.name.strip():
            raise ValidationException("Tenant name is required", field="name")

    def is_active(self) -> bool:
        """Return whether this tenant accepts traffic and scheduled workflow runs."""
        return self.status == TenantStatus.ACTIVE


@dataclass(frozen=True)
class TenantConfig:
    """Per-tenant configuration, loaded once per operation.

    timezone is the reference timezone for all calendar reasoning ("today",
    event dates, dedup day windows). Unknown names fall back to UTC.
    """

    tenant_id: str
    name: str
    timezone: str = "UTC"
    default_task_priority: str = TaskPriority.MEDIUM.value
    default_task_status: str = TaskStatus.PENDING.value

    @property
    def zone(self) -> ZoneInfo:
        return get_zone(self.timezone)

    def today(self, now: datetime) -> date:
        """Calendar date of `now` in the tenant's reference timezone."""
        return local_today(now, self.zone)
