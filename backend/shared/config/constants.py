"""
Centralized constants for the action layer.
Avoids magic strings for action names, change types and cache keys.

Usage:
    from shared.config.constants import Actions, ChangeType, CACHE_KEYS

    if action == Actions.LIST:
        ...

    keys = CACHE_KEYS[Actions.FIND]
"""

from typing import Final


# =============================================================================
# Actions
# =============================================================================


class Actions:
    """Names of the actions every entity service exposes."""

    FIND: Final[str] = "find"
    COUNT: Final[str] = "count"
    LIST: Final[str] = "list"
    GET: Final[str] = "get"
    SAVE: Final[str] = "save"
    UPDATE: Final[str] = "update"
    REMOVE: Final[str] = "remove"

    ALL: Final[list[str]] = [FIND, COUNT, LIST, GET, SAVE, UPDATE, REMOVE]
    READ: Final[list[str]] = [FIND, COUNT, LIST, GET]
    WRITE: Final[list[str]] = [SAVE, UPDATE, REMOVE]


# Parameters that take part in the response cache key, per action
CACHE_KEYS: Final[dict[str, tuple[str, ...]]] = {
    Actions.FIND: ("fields", "limit", "offset", "sort", "search", "searchFields", "query"),
    Actions.COUNT: ("search", "searchFields", "query"),
    Actions.LIST: ("fields", "page", "pageSize", "sort", "search", "searchFields", "query"),
    Actions.GET: ("id", "fields", "mapping"),
}

# Suggested REST mapping of the actions (method, path)
REST_ROUTES: Final[dict[str, tuple[str, str]]] = {
    Actions.LIST: ("GET", "/"),
    Actions.GET: ("GET", "/{id}"),
    Actions.SAVE: ("POST", "/"),
    Actions.UPDATE: ("PUT", "/{id}"),
    Actions.REMOVE: ("DELETE", "/{id}"),
}


# =============================================================================
# Query parameters
# =============================================================================


class Params:
    """Query parameter names understood by the normalizer."""

    ID: Final[str] = "id"
    LIMIT: Final[str] = "limit"
    OFFSET: Final[str] = "offset"
    PAGE: Final[str] = "page"
    PAGE_SIZE: Final[str] = "pageSize"
    SORT: Final[str] = "sort"
    FIELDS: Final[str] = "fields"
    POPULATE: Final[str] = "populate"
    SEARCH: Final[str] = "search"
    SEARCH_FIELDS: Final[str] = "searchFields"
    QUERY: Final[str] = "query"

    NUMERIC: Final[tuple[str, ...]] = (LIMIT, OFFSET, PAGE, PAGE_SIZE)
    LISTS: Final[tuple[str, ...]] = (SORT, FIELDS, POPULATE, SEARCH_FIELDS)
    PAGINATION: Final[tuple[str, ...]] = (LIMIT, OFFSET)


# =============================================================================
# Entity changes
# =============================================================================


class ChangeType:
    """Kinds of mutation broadcast after a write."""

    CREATED: Final[str] = "created"
    UPDATED: Final[str] = "updated"
    REMOVED: Final[str] = "removed"

    ALL: Final[list[str]] = [CREATED, UPDATED, REMOVED]


def change_hook_name(change_type: str) -> str:
    """Name of the service hook run after a change, e.g. ``entity_removed``."""
    return f"entity_{change_type}"


# =============================================================================
# Defaults
# =============================================================================


DEFAULT_ID_FIELD: Final[str] = "_id"
