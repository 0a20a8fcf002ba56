"""
Shared module for the ambient infrastructure of entity services.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Action names, cache-key sets, change types

- shared.infrastructure: Messaging and caching
  - events/: Redis pub/sub, event publishing, circuit breaker
  - cache/: Action response cache
  - redis/: Key layouts and TTLs
  - correlation.py: Request IDs for logging

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - awaitables.py: Sync/async hook helper

IMPORT EXAMPLES:
    from shared.config.settings import settings
    from shared.config.constants import Actions, ChangeType
    from shared.infrastructure.events import RedisEventPublisher
    from shared.infrastructure.cache import RedisCacher
    from shared.utils.exceptions import EntityNotFoundError, ValidationError
"""

# No re-exports; import from the canonical paths documented above.
