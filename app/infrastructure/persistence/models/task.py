"""Task and TaskTemplate ORM models.

Tasks are created manually through the API or by the create_task workflow
action; auto-created tasks carry the workflow back-references.
"""

from datetime import date

import sqlalchemy as sa
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import TaskPriority, TaskStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    MultiTenantModel,
    in_values_check,
)


class TaskTemplate(MultiTenantModel, Base):
    """Reusable task blueprint referenced by create_task actions. Table: task_template."""

    __tablename__ = "task_template"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    default_title: Mapped[str] = mapped_column(String(500), nullable=False)
    default_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    default_priority: Mapped[str | None] = mapped_column(String(32), nullable=True)
    due_offset_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    task_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    department: Mapped[str | None] = mapped_column(String(64), nullable=True)
    enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sa.text("true")
    )


class Task(MultiTenantModel, Base):
    """Task. Table: task.

    entity_type/entity_id point at the record the task concerns (event or
    task). workflow_execution_id is back-filled when the run is finalized.
    """

    __tablename__ = "task"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=TaskPriority.MEDIUM.value,
        server_default=sa.text("'medium'"),
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=TaskStatus.PENDING.value,
        server_default=sa.text("'pending'"),
    )
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    assigned_to_user_id: Mapped[str | None] = mapped_column(String, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String, nullable=True)
    entity_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    entity_id: Mapped[str | None] = mapped_column(String, nullable=True)
    task_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    department: Mapped[str | None] = mapped_column(String(64), nullable=True)
    auto_created: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sa.text("false")
    )
    workflow_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("workflow.id", ondelete="SET NULL"), nullable=True, index=True
    )
    workflow_action_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("workflow_action.id", ondelete="SET NULL"), nullable=True
    )
    workflow_execution_id: Mapped[str | None] = mapped_column(
        String,
        ForeignKey("workflow_execution.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    __table_args__ = (
        Index("ix_task_tenant_entity", "tenant_id", "entity_type", "entity_id"),
        Index("ix_task_assigned", "tenant_id", "assigned_to_user_id"),
        CheckConstraint(
            in_values_check("status", TaskStatus.values()),
            name="task_status_check",
        ),
        CheckConstraint(
            in_values_check("priority", TaskPriority.values()),
            name="task_priority_check",
        ),
    )
