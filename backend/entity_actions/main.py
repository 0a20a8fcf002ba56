"""
Entity actions application.
Builds the FastAPI app exposing one router per entity service.

Usage:
    files = EntityService("files", adapter=S3FileAdapter(bucket="uploads"))
    app = create_app(files)

    # uvicorn module:app
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shared.config.settings import settings
from shared.infrastructure.correlation import CorrelationIdMiddleware
from shared.utils.exceptions import AppException
from entity_actions.core.lifespan import build_lifespan
from entity_actions.routers.entity import build_entity_router
from entity_actions.schemas import ErrorResponse
from entity_actions.services.base_service import EntityService


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render client-visible errors with their structured data."""
    body = ErrorResponse(detail=exc.detail, data=exc.data)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(mode="json"),
        headers=exc.headers,
    )


def create_app(*services: EntityService, title: str = "Entity Actions API") -> FastAPI:
    """FastAPI application serving the CRUD actions of ``services``."""
    app = FastAPI(
        title=title,
        description="Generic CRUD actions over pluggable storage adapters",
        version="0.1.0",
        lifespan=build_lifespan(services),
    )

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_middleware(CorrelationIdMiddleware)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get("/health")
    def health_check():
        """Service status plus the connection state of every adapter."""
        states = {service.name: service.connection.state.value for service in services}
        return {
            "status": "healthy" if all(s.connection.is_connected for s in services) else "degraded",
            "environment": settings.environment,
            "services": states,
        }

    # =========================================================================
    # Include Routers
    # =========================================================================

    for service in services:
        app.include_router(build_entity_router(service))

    return app
