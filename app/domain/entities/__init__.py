"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from app.domain.entities.subject import TriggerSubject
from app.domain.entities.tenant import TenantConfig, TenantEntity
from app.domain.entities.workflow import WorkflowActionEntity, WorkflowEntity

__all__ = [
    "TenantConfig",
    "TenantEntity",
    "TriggerSubject",
    "WorkflowActionEntity",
    "WorkflowEntity",
]
