"""DTOs for tenant reads (no dependency on ORM)."""

from dataclasses import dataclass, field
from typing import Any

from app.domain.entities.tenant import TenantConfig
from app.domain.enums import TaskPriority, TaskStatus, TenantStatus
from app.shared.utils.datetime import is_valid_timezone


@dataclass(frozen=True)
class TenantResult:
    """Tenant read-model (result of get_by_id, get_active_tenants)."""

    id: str
    code: str
    name: str
    status: TenantStatus
    timezone: str = "UTC"
    settings: dict[str, Any] = field(default_factory=dict)

    def to_config(self, default_timezone: str = "UTC") -> TenantConfig:
        """Typed per-tenant configuration; unknown or missing values use defaults."""
        priority = self.settings.get("default_task_priority")
        status = self.settings.get("default_task_status")
        return TenantConfig(
            tenant_id=self.id,
            name=self.name,
            timezone=self.timezone if is_valid_timezone(self.timezone) else default_timezone,
            default_task_priority=(
                priority if priority in TaskPriority.values() else TaskPriority.MEDIUM.value
            ),
            default_task_status=(
                status if status in TaskStatus.values() else TaskStatus.PENDING.value
            ),
        )
