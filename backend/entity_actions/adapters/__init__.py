"""
Storage adapters.
"""

from .base import StorageAdapter

__all__ = ["StorageAdapter"]
