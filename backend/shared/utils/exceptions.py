"""
Centralized exceptions for consistent error handling.

Client-visible errors are HTTP exceptions so the FastAPI binding surfaces
them without extra handlers; they log themselves on construction.

Usage:
    from shared.utils.exceptions import EntityNotFoundError, ValidationError

    raise EntityNotFoundError(file_id)
    raise ValidationError("Entity validation error!", data=errors)
"""

from fastapi import HTTPException, status
from typing import Any

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All client-visible exceptions inherit from this class to ensure
    consistent logging and response format. ``data`` carries structured
    details for the caller (the missing id, validator output).
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        data: Any = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.data = data


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("File", 123)
    """

    def __init__(self, entity: str, entity_id: Any = None, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{entity} not found",
            log_level="warning",
            data={"id": entity_id},
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )
        self.entity_id = entity_id


class EntityNotFoundError(NotFoundError):
    """
    The adapter reported no entity for the requested id.

    Raised by ``get`` and ``remove``; ``update`` raises it too when its
    metadata mapping carries anything other than the identifier.
    """

    def __init__(self, entity_id: Any, **log_context: Any):
        super().__init__("Entity", entity_id, **log_context)


# =============================================================================
# 422 Validation Errors
# =============================================================================


class ValidationError(AppException):
    """
    Entity validation error (422).

    Usage:
        raise ValidationError("Entity validation error!", data=[{"field": "name"}])
    """

    def __init__(self, detail: str, data: Any = None, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            log_level="warning",
            data=data,
            **log_context,
        )


# =============================================================================
# Configuration Errors
# =============================================================================


class ServiceConfigurationError(RuntimeError):
    """
    A service was declared without something it cannot run without.

    Not client-visible: raised while the service starts.
    """
