"""Global rate limiter instance for SlowAPI."""

from slowapi import Limiter
from slowapi.util import get_remote_address
from common.core.config import settings

# Per-client limits on the user-facing endpoints; webhooks are not limited so
# provider redeliveries are never throttled.
# Memory storage is per process; point RATE_LIMIT_STORAGE_URI at redis:// when
# running more than one replica.
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["120/minute"],
    storage_uri=settings.rate_limit_storage_uri,
)
