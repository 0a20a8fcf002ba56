"""
Configuration module: Settings, logging, constants.
"""

from shared.config.settings import settings, REDIS_URL
from shared.config.logging import get_logger, setup_logging
from shared.config.constants import (
    Actions,
    ChangeType,
    Params,
    CACHE_KEYS,
    REST_ROUTES,
    DEFAULT_ID_FIELD,
    change_hook_name,
)

__all__ = [
    # settings
    "settings",
    "REDIS_URL",
    # logging
    "get_logger",
    "setup_logging",
    # constants
    "Actions",
    "ChangeType",
    "Params",
    "CACHE_KEYS",
    "REST_ROUTES",
    "DEFAULT_ID_FIELD",
    "change_hook_name",
]
