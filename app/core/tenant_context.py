"""Request tenant for row-level security, and the identifier format shared by headers and SET LOCAL.

TenantContextMiddleware publishes the tenant header here; get_db and
get_db_transactional read it back to run SET LOCAL app.current_tenant_id.
Scheduler passes have no request and pass the tenant id explicitly.
"""

import re
from contextvars import ContextVar, Token

IDENTIFIER_MAX_LENGTH = 64
_IDENTIFIER_RE = re.compile(rf"[A-Za-z0-9_-]{{1,{IDENTIFIER_MAX_LENGTH}}}")

_current_tenant_id: ContextVar[str | None] = ContextVar("current_tenant_id", default=None)


def is_valid_identifier(value: str | None) -> bool:
    """True for CUID/UUID-style ids (tenant and user headers, SET LOCAL values)."""
    return bool(value) and _IDENTIFIER_RE.fullmatch(value) is not None


def bind_tenant_id(tenant_id: str | None) -> Token[str | None]:
    """Publish tenant_id for the current request; returns the token for reset."""
    return _current_tenant_id.set(tenant_id)


def reset_tenant_id(token: Token[str | None]) -> None:
    _current_tenant_id.reset(token)


def current_tenant_id() -> str | None:
    return _current_tenant_id.get()
