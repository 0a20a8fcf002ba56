"""
Event Type Constants.

Defines the event types the action layer publishes over Redis pub/sub.
"""

# =============================================================================
# Cache events
# =============================================================================

CACHE_CLEAN = "CACHE_CLEAN"  # Drop cached action responses of a service

# =============================================================================
# Size limits
# =============================================================================

# Maximum serialized size of a single event
MAX_EVENT_SIZE = 64 * 1024
