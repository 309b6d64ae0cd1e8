"""Tenant repository. Returns application DTOs."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.tenant import TenantResult
from app.domain.enums import TenantStatus
from app.infrastructure.persistence.models.tenant import Tenant
from app.infrastructure.persistence.repositories.base import BaseRepository


def _tenant_to_result(t: Tenant) -> TenantResult:
    """Map ORM Tenant to application TenantResult."""
    return TenantResult(
        id=t.id,
        code=t.code,
        name=t.name,
        status=TenantStatus(t.status),
        timezone=t.timezone or "UTC",
        settings=dict(t.settings or {}),
    )


class TenantRepository(BaseRepository[Tenant]):
    """Tenant repository. Implements ITenantRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Tenant)

    async def get_by_id(self, tenant_id: str) -> TenantResult | None:  # type: ignore[override]
        """Get tenant by ID."""
        tenant = await super().get_by_id(tenant_id)
        return _tenant_to_result(tenant) if tenant else None

    async def get_active_tenants(
        self, skip: int = 0, limit: int = 100
    ) -> list[TenantResult]:
        """Active tenants ordered by id (stable pagination)."""
        result = await self.db.execute(
            select(Tenant)
            .where(Tenant.status == TenantStatus.ACTIVE.value)
            .order_by(Tenant.id)
            .offset(skip)
            .limit(limit)
        )
        return [_tenant_to_result(t) for t in result.scalars().all()]

    async def get_all_active(self, batch_size: int = 500) -> list[TenantResult]:
        """All active tenants, fetched in pages of batch_size."""
        tenants: list[TenantResult] = []
        skip = 0
        while True:
            page = await self.get_active_tenants(skip=skip, limit=batch_size)
            tenants.extend(page)
            if len(page) < batch_size:
                return tenants
            skip += len(page)
