"""
Storage adapter interface.

Entity services never touch storage themselves: every read and write is
delegated to an adapter implementing the operations below. Adapters may
additionally define

- ``init(service)``: called once when the service is created
- ``disconnect()``: called when the service stops
- ``after_retrieve_transform_id(doc, id_field)``: per-document hook run
  on every document the service returns

which the service looks up with ``getattr`` and skips when absent.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping


class StorageAdapter(ABC):
    """Abstract base for adapters (file stores, databases, blob services)."""

    @abstractmethod
    async def connect(self) -> None:
        """Resolve once the backing store is reachable."""
        ...

    @abstractmethod
    async def find(self, params: Mapping[str, Any]) -> list[Any]:
        """Documents matching the normalized query parameters."""
        ...

    @abstractmethod
    async def count(self, params: Mapping[str, Any]) -> int:
        """Number of documents matching the parameters (never paginated)."""
        ...

    @abstractmethod
    async def find_by_id(self, entity_id: Any) -> Any:
        """The document or binary stream with this id, or a falsy value."""
        ...

    @abstractmethod
    async def save(self, entity: Any, meta: Mapping[str, Any]) -> Any:
        """Store a new entity; the result is returned to the caller unchanged."""
        ...

    @abstractmethod
    async def update_by_id(self, entity: Any, entity_id: Any) -> Any:
        """Replace the entity stored under ``entity_id``."""
        ...

    @abstractmethod
    async def remove_by_id(self, entity_id: Any) -> Any:
        """Delete the entity; returns the removed document or a falsy value."""
        ...
