"""
HTTP routers.
"""

from .entity import build_entity_router

__all__ = ["build_entity_router"]
