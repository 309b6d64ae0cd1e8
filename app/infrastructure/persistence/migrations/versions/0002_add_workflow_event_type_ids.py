"""Add event_type_ids to workflow (event_created trigger filter).

Revision ID: 0002_event_type_ids
Revises: 0001_initial
Create Date: 2026-10-16

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0002_event_type_ids"
down_revision: Union[str, Sequence[str], None] = "0001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column(
        "workflow",
        sa.Column("event_type_ids", sa.JSON(), nullable=True),
    )
    op.create_index(
        "ix_crm_event_tenant_event_type", "crm_event", ["tenant_id", "event_type_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_crm_event_tenant_event_type", table_name="crm_event")
    op.drop_column("workflow", "event_type_ids")
