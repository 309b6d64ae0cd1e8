"""Role-based assignee lookup for workflow actions."""

from __future__ import annotations

from typing import Any

from app.application.interfaces.repositories import ITenantRepository
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

ROLE_ASSIGNEES_SETTING = "role_assignees"


class TenantSettingsRoleResolver:
    """Resolves a role code to a user id from tenant.settings["role_assignees"].

    The mapping is read once per tenant per resolver instance (one resolver
    per request or scheduler tenant pass).
    """

    def __init__(self, tenant_repo: ITenantRepository) -> None:
        self._tenant_repo = tenant_repo
        self._mappings: dict[str, dict[str, Any]] = {}

    async def _mapping(self, tenant_id: str) -> dict[str, Any]:
        if tenant_id not in self._mappings:
            tenant = await self._tenant_repo.get_by_id(tenant_id)
            raw = (tenant.settings if tenant else {}).get(ROLE_ASSIGNEES_SETTING)
            self._mappings[tenant_id] = raw if isinstance(raw, dict) else {}
        return self._mappings[tenant_id]

    async def resolve_user_id(self, tenant_id: str, role: str) -> str | None:
        """Return the user configured for role in tenant, or None."""
        user_id = (await self._mapping(tenant_id)).get(role)
        if not isinstance(user_id, str) or not user_id:
            logger.debug("No assignee configured for role %r (tenant_id=%s)", role, tenant_id)
            return None
        return user_id
