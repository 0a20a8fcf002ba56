"""
Adapter connection lifecycle.

``start`` keeps trying to connect, with a fixed delay between attempts
and no attempt limit, until the adapter connects or ``stop`` is called.
``stop`` ends a pending retry loop and disconnects the adapter.

Usage:
    manager = ConnectionManager(adapter, service="files")
    await manager.start()   # returns once connected
    ...
    await manager.stop()
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Callable

from shared.config.logging import connection_logger as logger
from shared.config.settings import settings
from shared.utils.awaitables import maybe_await
from shared.utils.exceptions import ServiceConfigurationError


class ConnectionState(str, Enum):
    """States of the adapter connection."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ConnectionManager:
    """Connects the storage adapter at start and disconnects it at stop."""

    def __init__(
        self,
        adapter: Any,
        *,
        service: str,
        after_connected: Callable[[], Any] | None = None,
        retry_delay: float | None = None,
    ):
        self._adapter = adapter
        self._service = service
        self._after_connected = after_connected
        self._retry_delay = settings.connect_retry_delay if retry_delay is None else retry_delay

        self._state = ConnectionState.DISCONNECTED
        self._stopping = asyncio.Event()

        # Metrics
        self.failed_attempts = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    async def start(self) -> bool:
        """
        Connect to the adapter, retrying until it succeeds.

        Returns:
            True once connected, False if ``stop`` interrupted the retries.

        Raises:
            ServiceConfigurationError: If no adapter is configured.
        """
        if self._adapter is None:
            raise ServiceConfigurationError(
                f"Service '{self._service}' has no storage adapter configured"
            )

        self._stopping.clear()
        self._state = ConnectionState.CONNECTING

        while True:
            try:
                await maybe_await(self._adapter.connect())
                break
            except Exception as e:
                self.failed_attempts += 1
                logger.error(
                    "Connection error!",
                    service=self._service,
                    attempt=self.failed_attempts,
                    error=str(e),
                )

            if await self._wait_for_stop(self._retry_delay):
                self._state = ConnectionState.DISCONNECTED
                logger.info("Connection attempts abandoned", service=self._service)
                return False

            logger.warning("Reconnecting...", service=self._service)

        # stop() ran while connect() was in flight
        if self._stopping.is_set():
            await self._disconnect()
            logger.info("Connection attempts abandoned", service=self._service)
            return False

        self._state = ConnectionState.CONNECTED
        logger.info("Adapter connected", service=self._service)

        await self._run_after_connected()
        return True

    async def stop(self) -> None:
        """Interrupt a pending retry loop and disconnect the adapter."""
        self._stopping.set()
        await self._disconnect()

    async def _disconnect(self) -> None:
        if self._adapter is None:
            return

        disconnect = getattr(self._adapter, "disconnect", None)
        if callable(disconnect):
            await maybe_await(disconnect())
            logger.info("Adapter disconnected", service=self._service)

        self._state = ConnectionState.DISCONNECTED

    async def _wait_for_stop(self, delay: float) -> bool:
        """Sleep for ``delay`` seconds; True if ``stop`` was called meanwhile."""
        try:
            await asyncio.wait_for(self._stopping.wait(), timeout=delay)
            return True
        except asyncio.TimeoutError:
            return False

    async def _run_after_connected(self) -> None:
        if self._after_connected is None:
            return
        try:
            await maybe_await(self._after_connected())
        except Exception as e:
            logger.error(
                "afterConnected error!",
                service=self._service,
                error=str(e),
                exc_info=True,
            )
