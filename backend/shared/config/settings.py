"""
Application settings loaded from environment variables.
Uses pydantic-settings for type-safe configuration.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Process-wide settings with defaults for development."""

    # Redis (pub/sub for cache invalidation, response cache)
    redis_url: str = "redis://localhost:6379"
    redis_pool_max_connections: int = 50
    redis_socket_timeout: int = 5  # Socket timeout in seconds (connect and read/write)
    redis_publish_max_retries: int = 3  # Max retries for event publishing
    redis_publish_retry_delay: float = 0.1  # Base delay between retries in seconds
    publish_circuit_failure_threshold: int = 5  # Failed publishes before the circuit opens
    publish_circuit_recovery_timeout: float = 30.0  # Seconds before a trial publish

    # Action response cache
    cache_enabled: bool = True
    cache_ttl_seconds: int = 300

    # Adapter connection
    connect_retry_delay: float = 1.0  # Fixed delay between connection attempts

    # Listing defaults for services that don't override them
    default_page_size: int = 10
    default_max_page_size: int = 100  # <= 0 disables the cap
    default_max_limit: int = -1  # <= 0 disables the cap

    # HTTP binding
    rest_api_port: int = 8000

    # Environment
    environment: str = "development"
    debug: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    def validate_production_settings(self) -> list[str]:
        """
        Validate settings that must not keep development values in production.
        Returns a list of validation errors. Empty list means all checks pass.
        """
        errors = []

        if self.environment == "production":
            if self.debug:
                errors.append("DEBUG must be False in production")

            if self.connect_retry_delay <= 0:
                errors.append("CONNECT_RETRY_DELAY must be positive")

            if self.default_page_size <= 0:
                errors.append("DEFAULT_PAGE_SIZE must be positive")

        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience exports
settings = get_settings()

# Direct access to commonly used settings
REDIS_URL = settings.redis_url
