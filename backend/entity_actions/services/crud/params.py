"""
Query parameter normalization.

Turns the raw parameters of an action call into the typed form the
adapter receives: numeric pagination values, list-valued sort/fields/
populate/searchFields, and limit/offset derived from page/pageSize for
the ``list`` action.

Usage:
    normalizer = ParamsNormalizer(ServiceSettings(page_size=20))
    params = normalizer.normalize({"page": "2", "sort": "name,-size"}, "list")
    # {"page": 2, "pageSize": 20, "limit": 20, "offset": 20, "sort": ["name", "-size"]}
"""

from __future__ import annotations

from typing import Any, Mapping

from shared.config.constants import Actions, Params
from shared.config.logging import get_logger
from entity_actions.schemas import ServiceSettings

logger = get_logger(__name__)


def to_number(value: Any) -> int | float | None:
    """
    Convert a string parameter to a number.

    Integers stay integers; anything unparsable becomes ``None`` so the
    listing defaults apply to it like to a missing value.
    """
    text = value.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        logger.debug("Ignoring non-numeric parameter", value=value)
        return None


def split_list(value: str) -> list[str]:
    """Split ``"a,b c"`` into ``["a", "b", "c"]``: commas and spaces both separate."""
    return value.replace(",", " ").split()


def is_list_action(action: str) -> bool:
    """True for ``list`` and for fully-qualified names such as ``files.list``."""
    return action == Actions.LIST or action.endswith(f".{Actions.LIST}")


class ParamsNormalizer:
    """Canonicalizes raw action parameters. Never raises; never mutates its input."""

    def __init__(self, settings: ServiceSettings):
        self._settings = settings

    def normalize(self, params: Mapping[str, Any] | None, action: str) -> dict[str, Any]:
        p: dict[str, Any] = dict(params or {})

        # Convert from string to number
        for name in Params.NUMERIC:
            if isinstance(p.get(name), str):
                p[name] = to_number(p[name])

        # Comma/space separated strings to lists
        for name in Params.LISTS:
            if isinstance(p.get(name), str):
                p[name] = split_list(p[name])

        if is_list_action(action):
            self._apply_paging(p)

        # Limit the `limit`
        max_limit = self._settings.max_limit
        limit = p.get(Params.LIMIT)
        if max_limit > 0 and limit is not None and limit > max_limit:
            p[Params.LIMIT] = max_limit

        return p

    def _apply_paging(self, p: dict[str, Any]) -> None:
        """Default page/pageSize, cap pageSize and derive limit/offset."""
        if not p.get(Params.PAGE_SIZE):
            p[Params.PAGE_SIZE] = self._settings.page_size

        if not p.get(Params.PAGE):
            p[Params.PAGE] = 1

        max_page_size = self._settings.max_page_size
        if max_page_size > 0 and p[Params.PAGE_SIZE] > max_page_size:
            p[Params.PAGE_SIZE] = max_page_size

        p[Params.LIMIT] = p[Params.PAGE_SIZE]
        p[Params.OFFSET] = (p[Params.PAGE] - 1) * p[Params.PAGE_SIZE]
