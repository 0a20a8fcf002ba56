"""
Cache package initialization.

Action response caching backed by Redis.
"""

from shared.infrastructure.cache.cacher import (
    Cacher,
    RedisCacher,
)

__all__ = [
    "Cacher",
    "RedisCacher",
]
