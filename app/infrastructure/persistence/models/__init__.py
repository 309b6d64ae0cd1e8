"""Persistence models: ORM entities and mixins.

Importing this package registers every table on Base.metadata (Alembic
autogenerate and env.py rely on it).
"""

from app.infrastructure.persistence.models.event import Event
from app.infrastructure.persistence.models.mixins import (
    AuditedMultiTenantModel,
    CuidMixin,
    MultiTenantModel,
    SoftDeleteMixin,
    TenantMixin,
    TimestampMixin,
    UserAuditMixin,
)
from app.infrastructure.persistence.models.notification import Notification
from app.infrastructure.persistence.models.task import Task, TaskTemplate
from app.infrastructure.persistence.models.tenant import Tenant
from app.infrastructure.persistence.models.workflow import (
    Workflow,
    WorkflowAction,
    WorkflowExecution,
)

__all__ = [
    "AuditedMultiTenantModel",
    "CuidMixin",
    "MultiTenantModel",
    "SoftDeleteMixin",
    "TenantMixin",
    "TimestampMixin",
    "UserAuditMixin",
    "Event",
    "Notification",
    "Task",
    "TaskTemplate",
    "Tenant",
    "Workflow",
    "WorkflowAction",
    "WorkflowExecution",
]
