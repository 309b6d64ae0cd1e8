"""Publishes the tenant header for row-level security.

Malformed ids are not published; tenant resolution rejects them with 400.
"""

from typing import Callable

from app.core.tenant_context import bind_tenant_id, is_valid_identifier, reset_tenant_id
from app.middleware.request_ids import get_header


def TenantContextMiddleware(app: Callable, header_name: str = "X-Tenant-ID") -> Callable:
    """Raw ASGI middleware binding the request tenant before routing."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        raw = (get_header(scope, header_name) or "").strip()
        token = bind_tenant_id(raw if is_valid_identifier(raw) else None)
        try:
            await app(scope, receive, send)
        finally:
            reset_tenant_id(token)

    return asgi_app
