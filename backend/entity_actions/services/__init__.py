"""
Entity service and its building blocks.

Provides:
- EntityService: the seven CRUD actions (base_service.py)
- ConnectionManager: adapter connect/disconnect with retry (connection.py)
- build_entity_validator: payload validation (validation.py)
- crud/: normalization, authorization, projection, pagination
- events/: cache invalidation and change hooks
"""

from .base_service import ActionContext, EntityService
from .connection import ConnectionManager, ConnectionState
from .validation import build_entity_validator

__all__ = [
    "ActionContext",
    "EntityService",
    "ConnectionManager",
    "ConnectionState",
    "build_entity_validator",
]
