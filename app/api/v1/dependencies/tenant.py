"""Tenant resolution: request -> TenantScope | EarlyResponse.

resolve_tenant never raises for caller mistakes; it returns a tagged result
that dependencies pattern-match on. The scheduler endpoint does not use this
(it runs cross-tenant).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.tenant_context import is_valid_identifier
from app.domain.entities.tenant import TenantConfig
from app.domain.enums import TenantStatus
from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.persistence.repositories.tenant_repo import TenantRepository
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TenantScope:
    """Resolved tenant: session (RLS already set), tenant id, typed config, caller."""

    db: AsyncSession
    tenant_id: str
    tenant_config: TenantConfig
    user_id: str | None = None


@dataclass(frozen=True)
class EarlyResponse:
    """Error response the request should short-circuit with."""

    status_code: int
    body: dict[str, Any] = field(default_factory=dict)


def _early(status_code: int, error: str, message: str) -> EarlyResponse:
    return EarlyResponse(status_code, {"error": error, "message": message})


async def resolve_tenant(
    request: Request, session: AsyncSession
) -> TenantScope | EarlyResponse:
    """Resolve the tenant header into a TenantScope, or the error to answer with."""
    settings = get_settings()
    header = settings.tenant_header_name
    tenant_id = (request.headers.get(header) or "").strip()
    if not tenant_id:
        return _early(400, "VALIDATION_ERROR", f"Missing required header: {header}")
    if not is_valid_identifier(tenant_id):
        return _early(
            400,
            "VALIDATION_ERROR",
            "Invalid tenant ID format (use alphanumeric, hyphen, underscore; max 64 characters)",
        )
    user_id = (request.headers.get(settings.user_header_name) or "").strip() or None
    if user_id is not None and not is_valid_identifier(user_id):
        return _early(400, "VALIDATION_ERROR", f"Invalid {settings.user_header_name} header")

    tenant = await TenantRepository(session).get_by_id(tenant_id)
    if tenant is None:
        return _early(404, "TENANT_NOT_FOUND", f"Tenant not found: {tenant_id}")
    if tenant.status != TenantStatus.ACTIVE:
        logger.info("Rejected request for %s tenant %s", tenant.status.value, tenant_id)
        return _early(403, "TENANT_INACTIVE", "Tenant is not active")
    return TenantScope(
        db=session,
        tenant_id=tenant.id,
        tenant_config=tenant.to_config(settings.workflow_default_timezone),
        user_id=user_id,
    )


def unwrap_scope(result: TenantScope | EarlyResponse) -> TenantScope:
    """Return the scope or raise the early response as an HTTPException."""
    match result:
        case TenantScope() as scope:
            return scope
        case EarlyResponse(status_code=status_code, body=body):
            raise HTTPException(status_code=status_code, detail=body)


async def require_tenant_scope(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TenantScope:
    """Tenant scope on a read session."""
    return unwrap_scope(await resolve_tenant(request, db))


async def require_tenant_scope_for_write(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> TenantScope:
    """Tenant scope on a transactional session (commit on success)."""
    return unwrap_scope(await resolve_tenant(request, db))
