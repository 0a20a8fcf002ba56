"""
Field-level read authorization and projection.

Field paths are dot-delimited (``"meta.size"``). The allow-list is parsed
into segment tuples once, when the service is configured; requested
paths are compared against it segment by segment, case-sensitively.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Iterable

Path = tuple[str, ...]

# Marks a path that does not resolve in a document
MISSING = object()


def split_path(field: str) -> Path:
    """``"user.name"`` -> ``("user", "name")``."""
    return tuple(field.split("."))


def get_path(doc: Any, path: Path) -> Any:
    """
    Read a nested value, returning MISSING when any segment is absent.

    Numeric segments index into lists (``"tags.0"``).
    """
    current = doc
    for segment in path:
        if isinstance(current, Mapping):
            if segment not in current:
                return MISSING
            current = current[segment]
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            if not segment.isdigit() or int(segment) >= len(current):
                return MISSING
            current = current[int(segment)]
        else:
            return MISSING
    return current


def set_path(target: dict[str, Any], path: Path, value: Any) -> None:
    """Write ``value`` under ``path``, creating intermediate dicts."""
    current = target
    for segment in path[:-1]:
        nested = current.get(segment)
        if not isinstance(nested, dict):
            nested = {}
            current[segment] = nested
        current = nested
    current[path[-1]] = value


def filter_fields(doc: Any, fields: list[str] | None) -> Any:
    """
    Project ``doc`` onto ``fields``.

    Returns a new dict holding only the named paths; paths missing from
    the document are left out. ``None`` means no projection and returns
    the document itself.
    """
    if fields is None:
        return doc

    result: dict[str, Any] = {}
    for field in fields:
        path = split_path(field)
        value = get_path(doc, path)
        if value is not MISSING:
            set_path(result, path, value)
    return result


class FieldAuthorizer:
    """
    Reduces requested field paths to those an allow-list permits.

    - an exact match is kept
    - a path under an allowed ancestor is kept (``user`` covers ``user.name``)
    - a parent path expands to the allowed paths beneath it
      (``user`` -> ``user.name``, ``user.email``)
    """

    def __init__(self, allowed: Iterable[str] | None = None):
        self._allowed: tuple[str, ...] = tuple(allowed or ())
        self._allowed_paths: tuple[Path, ...] = tuple(split_path(f) for f in self._allowed)
        self._allowed_set: frozenset[Path] = frozenset(self._allowed_paths)

    @property
    def allowed(self) -> tuple[str, ...]:
        return self._allowed

    @property
    def restricted(self) -> bool:
        """False when no allow-list is configured."""
        return bool(self._allowed)

    def authorize(self, requested: list[str] | None) -> list[str] | None:
        if not self.restricted or not requested:
            return requested

        result: list[str] = []
        for field in requested:
            path = split_path(field)

            if path in self._allowed_set:
                result.append(field)
                continue

            if self._has_allowed_ancestor(path):
                result.append(field)

            result.extend(self._allowed_descendants(path))

        # Deduplicate, keep first-seen order
        return list(dict.fromkeys(result))

    def _has_allowed_ancestor(self, path: Path) -> bool:
        for depth in range(len(path) - 1, 0, -1):
            if path[:depth] in self._allowed_set:
                return True
        return False

    def _allowed_descendants(self, path: Path) -> list[str]:
        depth = len(path)
        return [
            field
            for field, allowed_path in zip(self._allowed, self._allowed_paths)
            if len(allowed_path) > depth and allowed_path[:depth] == path
        ]
