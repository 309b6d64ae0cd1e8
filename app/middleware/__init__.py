"""HTTP middleware: request/correlation ids and tenant context.

Applied in main app; order matters (first added = outermost).
"""

from app.middleware.request_ids import RequestIdsMiddleware
from app.middleware.tenant_context import TenantContextMiddleware

__all__ = ["RequestIdsMiddleware", "TenantContextMiddleware"]
