"""Workflow, WorkflowAction and WorkflowExecution ORM models. Trigger-driven automation."""

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import (
    AuditedMultiTenantModel,
    CuidMixin,
    MultiTenantModel,
    TenantMixin,
    in_values_check,
)
from app.shared.enums import WorkflowActionType, WorkflowExecutionStatus


class Workflow(AuditedMultiTenantModel, Base):
    """Workflow definition. Table: workflow. Trigger + conditions + ordered actions."""

    __tablename__ = "workflow"

    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sa.text("true")
    )
    # Not constrained: unknown trigger types are stored and never match.
    trigger_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    trigger_config: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    conditions: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    # event_created only: event types the workflow applies to.
    event_type_ids: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    actions: Mapped[list["WorkflowAction"]] = relationship(
        back_populates="workflow",
        order_by="WorkflowAction.execution_order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_workflow_tenant_trigger", "tenant_id", "trigger_type", "is_active"),
    )


class WorkflowAction(MultiTenantModel, Base):
    """One step of a workflow. Table: workflow_action. Ordered by execution_order."""

    __tablename__ = "workflow_action"

    workflow_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("workflow.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    action_type: Mapped[str] = mapped_column(String(64), nullable=False)
    execution_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=sa.text("0")
    )
    task_template_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("task_template.id", ondelete="SET NULL"), nullable=True
    )
    assigned_to_user_id: Mapped[str | None] = mapped_column(String, nullable=True)
    assigned_to_role: Mapped[str | None] = mapped_column(String(64), nullable=True)
    due_offset_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    config: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    workflow: Mapped[Workflow] = relationship(back_populates="actions")

    __table_args__ = (
        UniqueConstraint(
            "workflow_id", "execution_order", name="uq_workflow_action_order"
        ),
        CheckConstraint(
            in_values_check("action_type", WorkflowActionType.values()),
            name="workflow_action_type_check",
        ),
    )


class WorkflowExecution(CuidMixin, TenantMixin, Base):
    """Workflow execution record. Table: workflow_execution.

    Inserted as running when the dedup window is claimed, finalized once
    with counters and created ids. The unique index on
    (tenant_id, workflow_id, trigger_entity_id, dedup_key) is what makes the
    claim exclusive; a NULL dedup_key never conflicts.
    """

    __tablename__ = "workflow_execution"

    workflow_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("workflow.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    trigger_type: Mapped[str] = mapped_column(String(64), nullable=False)
    trigger_entity_type: Mapped[str] = mapped_column(String(32), nullable=False)
    trigger_entity_id: Mapped[str] = mapped_column(String, nullable=False)
    dedup_key: Mapped[str | None] = mapped_column(String(128), nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=WorkflowExecutionStatus.RUNNING.value,
        index=True,
    )
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    actions_executed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    actions_successful: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    actions_failed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_task_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_artifact_ids: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )
    warnings: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index(
            "uq_workflow_execution_dedup",
            "tenant_id",
            "workflow_id",
            "trigger_entity_id",
            "dedup_key",
            unique=True,
        ),
        Index(
            "ix_workflow_execution_subject",
            "tenant_id",
            "workflow_id",
            "trigger_entity_id",
            "created_at",
        ),
        CheckConstraint(
            in_values_check("status", WorkflowExecutionStatus.values()),
            name="workflow_execution_status_check",
        ),
    )
