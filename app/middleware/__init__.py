"""HTTP middleware: request ID and tenant context.

Applied in main app; order matters (last added = outermost). The request ID
middleware must wrap the tenant context middleware so the id is available
when the context is built.
"""

from app.middleware.request_id import RequestIDMiddleware
from app.middleware.tenant_context import TenantContextMiddleware

__all__ = [
    "RequestIDMiddleware",
    "TenantContextMiddleware",
]
