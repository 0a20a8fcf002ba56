"""
Utilities module: Exceptions.
"""

from shared.utils.exceptions import (
    AppException,
    NotFoundError,
    EntityNotFoundError,
    ValidationError,
    ServiceConfigurationError,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "EntityNotFoundError",
    "ValidationError",
    "ServiceConfigurationError",
]
