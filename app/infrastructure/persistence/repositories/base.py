"""Base repository: primary-key and tenant-scoped lookups, flush-and-refresh writes."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Shared ORM access for one model.

    Tenant-serving reads go through get_model_in_tenant, so a row of another
    tenant looks exactly like a missing row. Rows are soft-deleted; there is
    no hard delete here.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def get_by_id(self, entity_id: str) -> ModelType | None:
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def get_model_in_tenant(self, entity_id: str, tenant_id: str) -> ModelType | None:
        """Row by id within tenant; soft-deleted rows excluded."""
        model: Any = self.model
        q = select(self.model).where(model.id == entity_id, model.tenant_id == tenant_id)
        if hasattr(model, "deleted_at"):
            q = q.where(model.deleted_at.is_(None))
        result = await self.db.execute(q)
        return result.scalar_one_or_none()

    async def create(self, obj: ModelType) -> ModelType:
        """Add, flush and refresh so server defaults are loaded."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def update(self, obj: ModelType) -> ModelType:
        """Flush pending changes of an attached row and refresh it."""
        await self.db.flush()
        await self.db.refresh(obj)
        return obj
