"""
Circuit Breaker for the cache invalidation broadcast.

After repeated publish failures the breaker opens and publishes fail
immediately with ``CircuitOpenError`` instead of waiting on Redis
timeouts and retries for every write. After ``recovery_timeout`` a
limited number of trial publishes are let through.
"""

from __future__ import annotations

import time
from enum import Enum

from shared.config.settings import settings
from shared.config.logging import get_logger

logger = get_logger(__name__)


class CircuitState(Enum):
    """States of the circuit breaker."""
    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Publishes rejected
    HALF_OPEN = "half_open"  # Trial publishes


class CircuitOpenError(ConnectionError):
    """Raised instead of publishing while the circuit is open."""


class PublishCircuitBreaker:
    """
    Circuit breaker guarding one publisher.

    Used from a single event loop; state changes happen between awaits.
    """

    def __init__(
        self,
        failure_threshold: int | None = None,
        recovery_timeout: float | None = None,
        half_open_max_calls: int = 1,
    ):
        self._failure_threshold = failure_threshold or settings.publish_circuit_failure_threshold
        self._recovery_timeout = (
            settings.publish_circuit_recovery_timeout if recovery_timeout is None else recovery_timeout
        )
        self._half_open_max_calls = half_open_max_calls

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at = 0.0
        self._half_open_calls = 0

        # Metrics
        self.rejected_count = 0

    @property
    def state(self) -> CircuitState:
        return self._state

    def before_call(self) -> None:
        """
        Admit a publish or reject it.

        Raises:
            CircuitOpenError: If the circuit is open.
        """
        if self._state is CircuitState.OPEN:
            if time.monotonic() - self._opened_at < self._recovery_timeout:
                self.rejected_count += 1
                raise CircuitOpenError("Event bus circuit is open")
            self._state = CircuitState.HALF_OPEN
            self._half_open_calls = 0
            logger.info("Publish circuit breaker transitioning to HALF_OPEN")

        if self._state is CircuitState.HALF_OPEN:
            if self._half_open_calls >= self._half_open_max_calls:
                self.rejected_count += 1
                raise CircuitOpenError("Event bus circuit is recovering")
            self._half_open_calls += 1

    def release(self) -> None:
        """Return the slot of an admitted call that reached neither outcome."""
        if self._state is CircuitState.HALF_OPEN and self._half_open_calls > 0:
            self._half_open_calls -= 1

    def record_failure(self) -> None:
        self._failure_count += 1

        if self._state is CircuitState.HALF_OPEN:
            self._open()
            logger.error("Publish circuit breaker OPEN (trial publish failed)")
        elif self._failure_count >= self._failure_threshold:
            self._open()
            logger.error(
                "Publish circuit breaker OPEN",
                failure_count=self._failure_count,
                threshold=self._failure_threshold,
            )

    def record_success(self) -> None:
        if self._state is CircuitState.HALF_OPEN:
            logger.info("Publish circuit breaker recovered to CLOSED")
        self._state = CircuitState.CLOSED
        self._failure_count = 0

    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = time.monotonic()

    def get_stats(self) -> dict:
        return {
            "state": self._state.value,
            "failure_count": self._failure_count,
            "rejected_count": self.rejected_count,
        }
