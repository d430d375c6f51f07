"""Rate limiting configuration using slowapi.

Provides a module-level Limiter instance that routers import for
per-endpoint limits, wired into the FastAPI app in main.py.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

# Default: 60 requests/minute per client IP.
# Write endpoints override with @limiter.limit("N/period"); such handlers
# must accept a ``request: Request`` argument.
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["60/minute"],
)

LOGIN_LOOKUP_LIMIT = "10/minute"
SUBMIT_LEAVE_LIMIT = "20/minute"
