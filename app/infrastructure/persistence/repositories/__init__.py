"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.event_repo import EventRepository
from app.infrastructure.persistence.repositories.notification_repo import (
    NotificationRepository,
)
from app.infrastructure.persistence.repositories.task_repo import (
    TaskRepository,
    TaskTemplateRepository,
)
from app.infrastructure.persistence.repositories.tenant_repo import TenantRepository
from app.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowExecutionRepository,
    WorkflowRepository,
)

__all__ = [
    "BaseRepository",
    "EventRepository",
    "NotificationRepository",
    "TaskRepository",
    "TaskTemplateRepository",
    "TenantRepository",
    "WorkflowExecutionRepository",
    "WorkflowRepository",
]
