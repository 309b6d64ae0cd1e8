"""Postgres-backed scheduler store: tenant listing and per-tenant units of work."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.application.dtos.tenant import TenantResult
from app.infrastructure.persistence.database import set_tenant_context
from app.infrastructure.persistence.repositories.event_repo import EventRepository
from app.infrastructure.persistence.repositories.tenant_repo import TenantRepository
from app.infrastructure.services.workflow_engine import WorkflowEngine


class SqlTriggerUnitOfWork:
    """Implements ITriggerUnitOfWork on one session scoped to one tenant.

    SET LOCAL only lasts for the current transaction, so the tenant context is
    set again after every commit and rollback.
    """

    def __init__(
        self, session: AsyncSession, tenant_id: str, *, retry_failed_runs: bool = False
    ) -> None:
        self.session = session
        self.tenant_id = tenant_id
        self.engine = WorkflowEngine.for_session(session, retry_failed_runs=retry_failed_runs)
        self.workflows = self.engine.workflow_repo
        self.events = EventRepository(session)
        self.runner = self.engine

    async def commit(self) -> None:
        await self.session.commit()
        await set_tenant_context(self.session, self.tenant_id)

    async def rollback(self) -> None:
        await self.session.rollback()
        await set_tenant_context(self.session, self.tenant_id)


class SqlWorkflowTriggerStore:
    """Implements IWorkflowTriggerStore over a session factory.

    The factory is resolved on first use, so a missing database surfaces inside
    the scheduler pass (as a fatal summary) rather than while wiring the store.
    """

    def __init__(
        self,
        session_factory: Callable[[], async_sessionmaker[AsyncSession]],
        *,
        tenant_batch_size: int = 500,
        retry_failed_runs: bool = False,
    ) -> None:
        self._session_factory = session_factory
        self._tenant_batch_size = tenant_batch_size
        self._retry_failed_runs = retry_failed_runs

    async def list_active_tenants(self) -> list[TenantResult]:
        async with self._session_factory()() as session:
            return await TenantRepository(session).get_all_active(self._tenant_batch_size)

    @asynccontextmanager
    async def tenant_scope(self, tenant_id: str) -> AsyncIterator[SqlTriggerUnitOfWork]:
        """Session restricted to tenant_id; uncommitted work is rolled back on exit."""
        async with self._session_factory()() as session:
            await set_tenant_context(session, tenant_id)
            yield SqlTriggerUnitOfWork(
                session, tenant_id, retry_failed_runs=self._retry_failed_runs
            )
