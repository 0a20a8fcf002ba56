"""
Entity validation for incoming payloads.

A service's ``entity_validator`` is either a pydantic model class, used
as the schema the payload must satisfy, or a callable that raises or
returns False to reject the entity. Both are turned into one async check
raising ``ValidationError``.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ValidationError as PydanticValidationError

from shared.utils.awaitables import maybe_await
from shared.utils.exceptions import ServiceConfigurationError, ValidationError

EntityCheck = Callable[[Any], Awaitable[None]]

VALIDATION_MESSAGE = "Entity validation error!"


def build_entity_validator(validator: Any) -> EntityCheck | None:
    """Compile ``validator`` into a check, or None when nothing is configured."""
    if validator is None:
        return None

    if isinstance(validator, type) and issubclass(validator, BaseModel):
        model = validator

        async def check_model(entity: Any) -> None:
            try:
                model.model_validate(entity)
            except PydanticValidationError as e:
                raise ValidationError(
                    VALIDATION_MESSAGE,
                    data=e.errors(include_url=False, include_context=False),
                    model=model.__name__,
                ) from e

        return check_model

    if callable(validator):

        async def check_callable(entity: Any) -> None:
            try:
                result = await maybe_await(validator(entity))
            except (ValueError, TypeError) as e:
                raise ValidationError(VALIDATION_MESSAGE, data=str(e)) from e
            if result is False:
                raise ValidationError(VALIDATION_MESSAGE)

        return check_callable

    raise ServiceConfigurationError(
        "entity_validator must be a pydantic model class or a callable, "
        f"got {type(validator).__name__}"
    )
