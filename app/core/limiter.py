"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules use the same
instance without circular imports. Limits are keyed by client address.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

PROVISION_TENANT_LIMIT = "5/minute"
WRITE_ENDPOINT_LIMIT = "120/minute"

limit_provision = limiter.limit(PROVISION_TENANT_LIMIT)
limit_writes = limiter.limit(WRITE_ENDPOINT_LIMIT)
