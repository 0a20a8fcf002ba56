"""
Redis Channel Naming.

Channels are scoped by the service namespace so that subscribers can
listen to a single service.
"""

from __future__ import annotations


def validate_service_name(name: str) -> None:
    """Service names end up in channel and key patterns; keep them plain."""
    if not isinstance(name, str) or not name:
        raise ValueError(f"service name must be a non-empty string, got {name!r}")
    if any(ch in name for ch in "*?[] "):
        raise ValueError(f"service name must not contain glob characters or spaces, got {name!r}")


def channel_cache_clean(service: str) -> str:
    """Channel on which cache invalidation of a service is broadcast."""
    validate_service_name(service)
    return f"cache.clean.{service}"
