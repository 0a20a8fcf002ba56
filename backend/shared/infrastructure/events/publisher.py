"""
Core Event Publishing with Retry and Validation.

``publish_event`` pushes one event onto a Redis channel, retrying with
exponential backoff and jitter. ``RedisEventPublisher`` wraps it behind
the ``EventPublisher`` interface injected into entity services.
"""

from __future__ import annotations

import asyncio
import random
from typing import Protocol, runtime_checkable

import redis.asyncio as redis

from shared.config.settings import settings
from shared.config.logging import get_logger
from .event_types import MAX_EVENT_SIZE
from .event_schema import Event
from .circuit_breaker import PublishCircuitBreaker
from .redis_pool import get_redis_pool

logger = get_logger(__name__)


@runtime_checkable
class EventPublisher(Protocol):
    """Publish/subscribe capability used to broadcast service events."""

    async def publish(self, channel: str, event: Event) -> int:
        """Publish ``event`` on ``channel``; returns the number of receivers."""
        ...


def _validate_event_size(event_json: str, event_type: str) -> bool:
    """
    Validate event size before publishing.

    Returns True if valid, raises ValueError if too large.
    """
    size = len(event_json.encode("utf-8"))
    if size > MAX_EVENT_SIZE:
        raise ValueError(
            f"Event {event_type} exceeds max size: {size} > {MAX_EVENT_SIZE} bytes"
        )
    return True


def calculate_retry_delay_with_jitter(attempt: int, base_delay: float = 0.5) -> float:
    """
    Exponential backoff with decorrelated jitter, capped at 10 seconds.

    Args:
        attempt: Current attempt number (0-indexed)
        base_delay: Base delay in seconds
    """
    exp_delay = min(base_delay * (2 ** attempt), 10.0)
    return random.uniform(base_delay, exp_delay)


async def publish_event(
    redis_client: redis.Redis,
    channel: str,
    event: Event,
) -> int:
    """
    Publish an event to a Redis channel.

    Args:
        redis_client: Async Redis client.
        channel: Redis channel name.
        event: Event to publish.

    Returns:
        Number of subscribers that received the message.

    Raises:
        ValueError: If event is too large.
        Exception: The last Redis error once all retries are exhausted.
    """
    event_json = event.to_json()
    _validate_event_size(event_json, event.type)

    last_error: Exception | None = None
    for attempt in range(settings.redis_publish_max_retries):
        try:
            return await redis_client.publish(channel, event_json)
        except Exception as e:
            last_error = e
            if attempt < settings.redis_publish_max_retries - 1:
                delay = calculate_retry_delay_with_jitter(
                    attempt, settings.redis_publish_retry_delay
                )
                logger.warning(
                    "Redis publish failed, retrying",
                    channel=channel,
                    event_type=event.type,
                    attempt=attempt + 1,
                    max_retries=settings.redis_publish_max_retries,
                    delay_seconds=round(delay, 2),
                    error=str(e),
                )
                await asyncio.sleep(delay)
            else:
                logger.error(
                    "Redis publish failed after all retries",
                    channel=channel,
                    event_type=event.type,
                    error=str(e),
                )

    raise last_error  # type: ignore[misc]


class RedisEventPublisher:
    """
    EventPublisher backed by Redis pub/sub.

    Uses the process-wide pool unless a client is given. A publish that
    still fails after its retries counts against the circuit breaker;
    while the circuit is open, ``publish`` raises ``CircuitOpenError``
    without touching Redis.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        breaker: PublishCircuitBreaker | None = None,
    ):
        self._redis = redis_client
        self.breaker = breaker or PublishCircuitBreaker()

    async def _client(self) -> redis.Redis:
        if self._redis is None:
            self._redis = await get_redis_pool()
        return self._redis

    async def publish(self, channel: str, event: Event) -> int:
        self.breaker.before_call()
        try:
            receivers = await publish_event(await self._client(), channel, event)
        except ValueError:
            # Oversized events do not count as failures
            self.breaker.release()
            raise
        except Exception:
            self.breaker.record_failure()
            raise
        self.breaker.record_success()
        return receivers
