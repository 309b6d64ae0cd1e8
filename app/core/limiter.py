"""SlowAPI limiter shared by main (app.state.limiter) and the routers.

Keyed on client address. Tests call limiter.reset() between cases.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Workflow and task mutations.
WRITE_LIMIT = "120/minute"
# Schedulers tick once a minute at most; leaves room for manual re-runs.
CRON_LIMIT = "10/minute"

limit_writes = limiter.limit(WRITE_LIMIT)
limit_cron = limiter.limit(CRON_LIMIT)
