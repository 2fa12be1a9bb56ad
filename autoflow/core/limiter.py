"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

WRITE_ENDPOINT_LIMIT = "120/minute"
MANUAL_RUN_LIMIT = "30/minute"
INBOUND_EVENT_LIMIT = "600/minute"

limit_writes = limiter.limit(WRITE_ENDPOINT_LIMIT)
limit_manual_runs = limiter.limit(MANUAL_RUN_LIMIT)
limit_inbound_events = limiter.limit(INBOUND_EVENT_LIMIT)
