"""
Application lifespan handler.
Starts the entity services on startup and stops them on shutdown.
"""

from contextlib import asynccontextmanager
from typing import Sequence

from fastapi import FastAPI

from shared.config.settings import settings
from shared.config.logging import setup_logging, entity_actions_logger as logger
from shared.infrastructure.events import close_redis_pool
from entity_actions.services.base_service import EntityService


def build_lifespan(services: Sequence[EntityService]):
    """Lifespan handler bound to ``services``."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.
        Runs on startup and shutdown.
        """
        # Initialize logging
        setup_logging()

        # Validate production settings before startup
        config_errors = settings.validate_production_settings()
        if config_errors:
            for error in config_errors:
                logger.error("Configuration error: %s", error)
            if settings.environment == "production":
                raise RuntimeError(
                    f"Production configuration errors: {'; '.join(config_errors)}. "
                    "Server will not start with this configuration."
                )
            else:
                logger.warning(
                    "Running with development defaults (acceptable for development only)"
                )

        # Startup
        logger.info("Starting entity actions API", port=settings.rest_api_port, env=settings.environment)

        # Each start() returns once its adapter is connected
        started: list[EntityService] = []
        for service in services:
            await service.start()
            started.append(service)
            logger.info("Service started", service=service.name)

        yield

        # Shutdown
        logger.info("Shutting down entity actions API")

        for service in reversed(started):
            try:
                await service.stop()
                logger.info("Service stopped", service=service.name)
            except Exception as e:
                logger.warning("Failed to stop service", service=service.name, error=str(e))

        # Close Redis connection pool on shutdown
        await close_redis_pool()
        logger.info("Redis connection pool closed")

    return lifespan
