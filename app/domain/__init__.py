"""Domain layer: entities, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import (
    TenantConfig,
    TenantEntity,
    TriggerSubject,
    WorkflowActionEntity,
    WorkflowEntity,
)
from app.domain.enums import EventStatus, TaskPriority, TaskStatus, TenantStatus
from app.domain.exceptions import (
    ActionExecutionException,
    CrmException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    ValidationException,
    WorkflowConfigurationException,
)

__all__ = [
    # Entities
    "TenantConfig",
    "TenantEntity",
    "TriggerSubject",
    "WorkflowActionEntity",
    "WorkflowEntity",
    # Enums
    "EventStatus",
    "TaskPriority",
    "TaskStatus",
    "TenantStatus",
    # Exceptions
    "ActionExecutionException",
    "CrmException",
    "ResourceNotFoundException",
    "SqlNotConfiguredException",
    "ValidationException",
    "WorkflowConfigurationException",
]
