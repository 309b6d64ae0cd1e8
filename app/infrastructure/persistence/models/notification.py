"""In-app notification ORM model (written by the send_notification action)."""

import sqlalchemy as sa
from sqlalchemy import Boolean, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import MultiTenantModel
from app.shared.enums import NotificationPriority


class Notification(MultiTenantModel, Base):
    """Notification for one user. Table: notification."""

    __tablename__ = "notification"

    user_id: Mapped[str] = mapped_column(String, nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=NotificationPriority.NORMAL.value,
        server_default=sa.text("'normal'"),
    )
    link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sa.text("false")
    )
    workflow_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("workflow.id", ondelete="SET NULL"), nullable=True
    )
    entity_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    entity_id: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (Index("ix_notification_user", "tenant_id", "user_id", "read"),)
