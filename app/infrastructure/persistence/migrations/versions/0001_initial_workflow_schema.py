"""initial schema: tenants, CRM events, tasks, workflows, executions, notifications

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-16

Row-level security is enabled on every tenant-scoped table. Policy: only
rows where tenant_id equals current_setting('app.current_tenant_id'). The
tenant table itself is not restricted: the scheduler lists active tenants
before it has a tenant context. Migrations should run as a role with
BYPASSRLS; the app role must not have it.
"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TENANT_SCOPED_TABLES = [
    "crm_event",
    "task_template",
    "workflow",
    "workflow_action",
    "workflow_execution",
    "task",
    "notification",
]


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _tenant_fk() -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(["tenant_id"], ["tenant.id"], ondelete="CASCADE")


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "tenant",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("timezone", sa.String(64), server_default=sa.text("'UTC'"), nullable=False),
        sa.Column("settings", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('active', 'suspended', 'archived')", name="tenant_status_check"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tenant_code", "tenant", ["code"], unique=True)
    op.create_index("ix_tenant_status", "tenant", ["status"])

    op.create_table(
        "crm_event",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "status", sa.String(32), server_default=sa.text("'scheduled'"), nullable=False
        ),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("event_date", sa.Date(), nullable=True),
        sa.Column("account_id", sa.String(), nullable=True),
        sa.Column("event_type_id", sa.String(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('scheduled', 'confirmed', 'in_progress', 'completed', 'cancelled')",
            name="crm_event_status_check",
        ),
        _tenant_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_crm_event_tenant_id", "crm_event", ["tenant_id"])
    op.create_index("ix_crm_event_account_id", "crm_event", ["account_id"])
    op.create_index("ix_crm_event_tenant_start_date", "crm_event", ["tenant_id", "start_date"])
    op.create_index("ix_crm_event_tenant_event_date", "crm_event", ["tenant_id", "event_date"])

    op.create_table(
        "task_template",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("default_title", sa.String(500), nullable=False),
        sa.Column("default_description", sa.Text(), nullable=True),
        sa.Column("default_priority", sa.String(32), nullable=True),
        sa.Column("due_offset_days", sa.Integer(), nullable=True),
        sa.Column("task_type", sa.String(64), nullable=True),
        sa.Column("department", sa.String(64), nullable=True),
        sa.Column("enabled", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        *_timestamps(),
        _tenant_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_task_template_tenant_id", "task_template", ["tenant_id"])

    op.create_table(
        "workflow",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column("trigger_type", sa.String(64), nullable=False),
        sa.Column("trigger_config", sa.JSON(), nullable=True),
        sa.Column("conditions", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("updated_by", sa.String(), nullable=True),
        sa.Column("deleted_by", sa.String(), nullable=True),
        _tenant_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workflow_tenant_id", "workflow", ["tenant_id"])
    op.create_index("ix_workflow_trigger_type", "workflow", ["trigger_type"])
    op.create_index("ix_workflow_deleted_at", "workflow", ["deleted_at"])
    op.create_index("ix_workflow_created_by", "workflow", ["created_by"])
    op.create_index(
        "ix_workflow_tenant_trigger", "workflow", ["tenant_id", "trigger_type", "is_active"]
    )

    op.create_table(
        "workflow_action",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("workflow_id", sa.String(), nullable=False),
        sa.Column("action_type", sa.String(64), nullable=False),
        sa.Column("execution_order", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("task_template_id", sa.String(), nullable=True),
        sa.Column("assigned_to_user_id", sa.String(), nullable=True),
        sa.Column("assigned_to_role", sa.String(64), nullable=True),
        sa.Column("due_offset_days", sa.Integer(), nullable=True),
        sa.Column("config", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "action_type IN ('create_task', 'assign_task', 'send_notification')",
            name="workflow_action_type_check",
        ),
        _tenant_fk(),
        sa.ForeignKeyConstraint(["workflow_id"], ["workflow.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["task_template_id"], ["task_template.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("workflow_id", "execution_order", name="uq_workflow_action_order"),
    )
    op.create_index("ix_workflow_action_tenant_id", "workflow_action", ["tenant_id"])
    op.create_index("ix_workflow_action_workflow_id", "workflow_action", ["workflow_id"])

    op.create_table(
        "workflow_execution",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("workflow_id", sa.String(), nullable=False),
        sa.Column("trigger_type", sa.String(64), nullable=False),
        sa.Column("trigger_entity_type", sa.String(32), nullable=False),
        sa.Column("trigger_entity_id", sa.String(), nullable=False),
        sa.Column("dedup_key", sa.String(128), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column(
            "started_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("actions_executed", sa.Integer(), nullable=False),
        sa.Column("actions_successful", sa.Integer(), nullable=False),
        sa.Column("actions_failed", sa.Integer(), nullable=False),
        sa.Column("created_task_ids", sa.JSON(), nullable=False),
        sa.Column("created_artifact_ids", sa.JSON(), nullable=False),
        sa.Column("warnings", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint(
            "status IN ('running', 'completed', 'partial', 'failed', 'skipped')",
            name="workflow_execution_status_check",
        ),
        _tenant_fk(),
        sa.ForeignKeyConstraint(["workflow_id"], ["workflow.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workflow_execution_tenant_id", "workflow_execution", ["tenant_id"])
    op.create_index("ix_workflow_execution_workflow_id", "workflow_execution", ["workflow_id"])
    op.create_index("ix_workflow_execution_status", "workflow_execution", ["status"])
    # Exclusive claim of a dedup window; NULL keys (released runs) never conflict.
    op.create_index(
        "uq_workflow_execution_dedup",
        "workflow_execution",
        ["tenant_id", "workflow_id", "trigger_entity_id", "dedup_key"],
        unique=True,
    )
    op.create_index(
        "ix_workflow_execution_subject",
        "workflow_execution",
        ["tenant_id", "workflow_id", "trigger_entity_id", "created_at"],
    )

    op.create_table(
        "task",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("priority", sa.String(32), server_default=sa.text("'medium'"), nullable=False),
        sa.Column("status", sa.String(32), server_default=sa.text("'pending'"), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("assigned_to_user_id", sa.String(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("entity_type", sa.String(32), nullable=True),
        sa.Column("entity_id", sa.String(), nullable=True),
        sa.Column("task_type", sa.String(64), nullable=True),
        sa.Column("department", sa.String(64), nullable=True),
        sa.Column("auto_created", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("workflow_id", sa.String(), nullable=True),
        sa.Column("workflow_action_id", sa.String(), nullable=True),
        sa.Column("workflow_execution_id", sa.String(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('pending', 'in_progress', 'completed', 'cancelled')",
            name="task_status_check",
        ),
        sa.CheckConstraint(
            "priority IN ('low', 'medium', 'high', 'urgent')", name="task_priority_check"
        ),
        _tenant_fk(),
        sa.ForeignKeyConstraint(["workflow_id"], ["workflow.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(
            ["workflow_action_id"], ["workflow_action.id"], ondelete="SET NULL"
        ),
        sa.ForeignKeyConstraint(
            ["workflow_execution_id"], ["workflow_execution.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_task_tenant_id", "task", ["tenant_id"])
    op.create_index("ix_task_workflow_id", "task", ["workflow_id"])
    op.create_index("ix_task_workflow_execution_id", "task", ["workflow_execution_id"])
    op.create_index("ix_task_tenant_entity", "task", ["tenant_id", "entity_type", "entity_id"])
    op.create_index("ix_task_assigned", "task", ["tenant_id", "assigned_to_user_id"])

    op.create_table(
        "notification",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("priority", sa.String(16), server_default=sa.text("'normal'"), nullable=False),
        sa.Column("link", sa.String(500), nullable=True),
        sa.Column("read", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("workflow_id", sa.String(), nullable=True),
        sa.Column("entity_type", sa.String(32), nullable=True),
        sa.Column("entity_id", sa.String(), nullable=True),
        *_timestamps(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(["workflow_id"], ["workflow.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notification_tenant_id", "notification", ["tenant_id"])
    op.create_index("ix_notification_user", "notification", ["tenant_id", "user_id", "read"])

    for table in TENANT_SCOPED_TABLES:
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")
        op.execute(
            f"CREATE POLICY tenant_isolation ON {table} "
            "USING (tenant_id = current_setting('app.current_tenant_id', true)) "
            "WITH CHECK (tenant_id = current_setting('app.current_tenant_id', true))"
        )


def downgrade() -> None:
    """Downgrade schema."""
    for table in reversed(TENANT_SCOPED_TABLES):
        op.execute(f"DROP POLICY IF EXISTS tenant_isolation ON {table}")
        op.execute(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY")

    op.drop_table("notification")
    op.drop_table("task")
    op.drop_table("workflow_execution")
    op.drop_table("workflow_action")
    op.drop_table("workflow")
    op.drop_table("task_template")
    op.drop_table("crm_event")
    op.drop_table("tenant")
