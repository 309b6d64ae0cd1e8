"""Notification repository (send_notification workflow action)."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.notification import Notification
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.shared.enums import NotificationPriority


class NotificationRepository(BaseRepository[Notification]):
    """Notification repository. Implements INotificationRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Notification)

    async def create_notification(
        self,
        tenant_id: str,
        user_id: str,
        title: str,
        *,
        message: str | None = None,
        priority: str = NotificationPriority.NORMAL.value,
        link: str | None = None,
        workflow_id: str | None = None,
        entity_type: str | None = None,
        entity_id: str | None = None,
    ) -> str:
        """Insert a notification; return its id."""
        notification = await self.create(
            Notification(
                tenant_id=tenant_id,
                user_id=user_id,
                title=title,
                message=message,
                priority=priority,
                link=link,
                workflow_id=workflow_id,
                entity_type=entity_type,
                entity_id=entity_id,
            )
        )
        return notification.id
