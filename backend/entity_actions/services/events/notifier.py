"""
Change notification after writes.

After a mutation the service's cached responses are dropped: a
``CACHE_CLEAN`` event is broadcast on ``cache.clean.<service>`` so other
processes purge their copies, and the local cacher removes every key
under ``<service>.*``. Then the ``entity_<change>`` hook of the service
runs, if one is configured.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from shared.config.constants import ChangeType, change_hook_name
from shared.config.logging import get_logger
from shared.infrastructure.cache import Cacher
from shared.infrastructure.correlation import get_request_id
from shared.infrastructure.events import (
    CACHE_CLEAN,
    Event,
    EventPublisher,
    channel_cache_clean,
)
from shared.infrastructure.redis.constants import get_service_cache_pattern
from shared.utils.awaitables import maybe_await

logger = get_logger(__name__)

# hook(document, context), sync or async
ChangeHook = Callable[[Any, Any], Any]


class ChangeNotifier:
    """Cache invalidation plus per-change hooks for one service."""

    def __init__(
        self,
        service: str,
        *,
        publisher: EventPublisher | None = None,
        cacher: Cacher | None = None,
        hooks: Mapping[str, ChangeHook] | None = None,
    ):
        self._service = service
        self._publisher = publisher
        self._cacher = cacher
        self._hooks = dict(hooks or {})

    async def notify(self, change_type: str, document: Any, context: Any = None) -> None:
        if change_type not in ChangeType.ALL:
            raise ValueError(f"Unknown change type: {change_type}")

        await self.clear_cache()

        hook = self._hooks.get(change_hook_name(change_type))
        if hook is not None:
            await maybe_await(hook(document, context))

    async def clear_cache(self) -> None:
        """Broadcast the invalidation and purge the local cache backend."""
        pattern = get_service_cache_pattern(self._service)

        if self._publisher is not None:
            event = Event(
                type=CACHE_CLEAN,
                service=self._service,
                entity={"pattern": pattern},
                request_id=get_request_id() or None,
            )
            try:
                await self._publisher.publish(channel_cache_clean(self._service), event)
            except Exception as e:
                # Remote caches fall back to TTL expiry
                logger.warning(
                    "Cache invalidation broadcast failed",
                    service=self._service,
                    error=str(e),
                )

        if self._cacher is not None:
            await self._cacher.clean(pattern)
