"""
Pydantic schemas of the action layer.

- ServiceSettings: per-service configuration
- FindParams, ListParams: declared parameters of the read actions
- ListResult: response of the ``list`` action
- ErrorResponse: body of client-visible errors
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.config.constants import DEFAULT_ID_FIELD
from shared.config.settings import settings


# =============================================================================
# Service configuration
# =============================================================================


class ServiceSettings(BaseModel):
    """
    Configuration of one entity service.

    ``fields`` is the allow-list of readable field paths; ``None`` or an
    empty list means no restriction. ``max_page_size`` and ``max_limit``
    disable their cap when <= 0.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    id_field: str = Field(default=DEFAULT_ID_FIELD, min_length=1)
    fields: list[str] | None = None
    page_size: int = Field(default_factory=lambda: settings.default_page_size, gt=0)
    max_page_size: int = Field(default_factory=lambda: settings.default_max_page_size)
    max_limit: int = Field(default_factory=lambda: settings.default_max_limit)
    entity_validator: Any = None

    @field_validator("fields", mode="before")
    @classmethod
    def split_legacy_fields(cls, value: Any) -> Any:
        """Accept the legacy space-delimited form, e.g. ``"_id name size"``."""
        if isinstance(value, str):
            return value.split()
        return value


# =============================================================================
# Action parameters
# =============================================================================


class FindParams(BaseModel):
    """Declared parameters of ``find`` and ``count``; other keys pass through."""

    model_config = ConfigDict(extra="allow")

    limit: int | None = Field(default=None, ge=0)
    offset: int | None = Field(default=None, ge=0)


class ListParams(BaseModel):
    """Declared parameters of ``list``; other keys pass through."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    page: int | None = Field(default=None, ge=1)
    page_size: int | None = Field(default=None, alias="pageSize", ge=0)


# =============================================================================
# Responses
# =============================================================================


class ListResult(BaseModel):
    """One page of entities plus the totals needed to render pagination."""

    model_config = ConfigDict(populate_by_name=True)

    rows: list[Any]
    total: int
    page: int
    page_size: int = Field(alias="pageSize")
    total_pages: int = Field(alias="totalPages")


class ErrorResponse(BaseModel):
    """Body returned for client-visible errors."""

    detail: str
    data: Any = None
