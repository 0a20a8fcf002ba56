"""
Service events: cache invalidation and change hooks.
"""

from .notifier import ChangeNotifier, ChangeHook

__all__ = [
    "ChangeNotifier",
    "ChangeHook",
]
