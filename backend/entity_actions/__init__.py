"""
Entity actions: generic CRUD over pluggable storage adapters.

Usage:
    from entity_actions import EntityService, ServiceSettings, create_app

    files = EntityService("files", adapter, ServiceSettings(page_size=20))
    app = create_app(files)
"""

from entity_actions.schemas import ListResult, ServiceSettings
from entity_actions.adapters import StorageAdapter
from entity_actions.services import ActionContext, EntityService
from entity_actions.main import create_app

__all__ = [
    "ActionContext",
    "EntityService",
    "ListResult",
    "ServiceSettings",
    "StorageAdapter",
    "create_app",
]
