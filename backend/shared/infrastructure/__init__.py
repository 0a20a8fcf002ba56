"""
Infrastructure module: Redis events, response cache, correlation.

Provides:
- Redis pub/sub for service broadcasts (events/)
- Action response cache (cache/)
- Correlation IDs for logging (correlation.py)
"""

from shared.infrastructure.events import (
    get_redis_pool,
    close_redis_pool,
    publish_event,
    EventPublisher,
    RedisEventPublisher,
)
from shared.infrastructure.cache import (
    Cacher,
    RedisCacher,
)

__all__ = [
    # events (Redis)
    "get_redis_pool",
    "close_redis_pool",
    "publish_event",
    "EventPublisher",
    "RedisEventPublisher",
    # cache
    "Cacher",
    "RedisCacher",
]
