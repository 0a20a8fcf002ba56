"""
Event System for service broadcasts via Redis pub/sub.

This package provides:
- Event schema and validation (event_schema.py)
- Event type constants (event_types.py)
- Circuit breaker for publishing (circuit_breaker.py)
- Channel naming conventions (channels.py)
- Redis connection pool management (redis_pool.py)
- Event publishing with retry (publisher.py)
"""

from .event_types import (
    CACHE_CLEAN,
    MAX_EVENT_SIZE,
)
from .event_schema import Event
from .circuit_breaker import CircuitOpenError, CircuitState, PublishCircuitBreaker
from .channels import channel_cache_clean, validate_service_name
from .redis_pool import get_redis_pool, close_redis_pool
from .publisher import (
    EventPublisher,
    RedisEventPublisher,
    publish_event,
    calculate_retry_delay_with_jitter,
)

__all__ = [
    # Event Types
    "CACHE_CLEAN",
    "MAX_EVENT_SIZE",
    # Event Schema
    "Event",
    # Circuit Breaker
    "CircuitOpenError",
    "CircuitState",
    "PublishCircuitBreaker",
    # Channels
    "channel_cache_clean",
    "validate_service_name",
    # Redis Pool
    "get_redis_pool",
    "close_redis_pool",
    # Publishing
    "EventPublisher",
    "RedisEventPublisher",
    "publish_event",
    "calculate_retry_delay_with_jitter",
]
