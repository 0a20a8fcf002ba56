"""
Redis constants and key building.
Centralizes TTLs and key layouts for better visibility and management.
"""

import json
from typing import Any, Iterable, Mapping

from shared.config.settings import settings

# =============================================================================
# TTL (Time To Live) Constants (in seconds)
# =============================================================================

ACTION_CACHE_TTL = settings.cache_ttl_seconds

# Cap on keys removed by a single clean() call
MAX_KEYS_PER_CLEAN = 10_000


# =============================================================================
# Key layouts
# =============================================================================


def _key_part(value: Any) -> str:
    """Render one parameter value in a stable form."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def get_action_cache_key(
    service: str,
    action: str,
    params: Mapping[str, Any],
    keys: Iterable[str],
) -> str:
    """
    Cache key for an action response.

    Only the parameters named in ``keys`` take part, so two calls that
    differ in anything else share an entry:
    ``files.list:fields=name|page=1|pageSize=10|sort=|...``
    """
    parts = [f"{key}={_key_part(params.get(key))}" for key in keys]
    return f"{service}.{action}:" + "|".join(parts)


def get_service_cache_pattern(service: str) -> str:
    """Glob matching every cached response of a service."""
    return f"{service}.*"
