"""
Event Schema.

Defines the Event dataclass broadcast by entity services.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class Event:
    """
    Event published by an entity service.

    ``service`` is the namespace of the emitting service; ``entity`` holds
    event-specific data (the changed document, the change type).
    """

    type: str
    service: str
    entity: dict[str, Any] = field(default_factory=dict)
    request_id: str | None = None
    ts: str | None = None
    v: int = 1  # Schema version for future compatibility

    def __post_init__(self) -> None:
        """Reject malformed events before they reach Redis."""
        if not self.type or not isinstance(self.type, str):
            raise ValueError("Event type must be a non-empty string")

        if not self.service or not isinstance(self.service, str):
            raise ValueError("Event service must be a non-empty string")

        if self.entity is not None and not isinstance(self.entity, dict):
            raise ValueError("Event entity must be a dict or None")

    def to_json(self) -> str:
        """Serialize event to JSON string."""
        data = asdict(self)
        data["entity"] = data["entity"] or {}
        data["ts"] = data["ts"] or datetime.now(timezone.utc).isoformat()
        return json.dumps(data, ensure_ascii=False, default=str)

    @classmethod
    def from_json(cls, json_str: str) -> "Event":
        """Deserialize event from JSON string."""
        data = json.loads(json_str)
        return cls(**data)
