"""
Pytest configuration and fixtures for backend tests.
"""

import copy
import itertools
from typing import Any

import pytest
from fastapi.testclient import TestClient

from entity_actions.adapters import StorageAdapter
from entity_actions.main import create_app
from entity_actions.schemas import ServiceSettings
from entity_actions.services import EntityService


class MemoryAdapter(StorageAdapter):
    """
    In-memory adapter for tests.

    Documents live in a dict keyed by ``_id``. ``find`` honours ``limit``,
    ``offset``, a flat equality ``query`` and a single ``sort`` field.
    Every call is recorded in ``calls`` so tests can assert what the
    service passed down.
    """

    def __init__(self, docs: list[dict] | None = None, fail_connects: int = 0):
        self.docs: dict[Any, dict] = {doc["_id"]: copy.deepcopy(doc) for doc in docs or []}
        self.fail_connects = fail_connects
        self.connect_attempts = 0
        self.connected = False
        self.calls: list[tuple[str, Any]] = []
        self._ids = itertools.count(1000)

    async def connect(self) -> None:
        self.connect_attempts += 1
        if self.connect_attempts <= self.fail_connects:
            raise ConnectionError(f"connect attempt {self.connect_attempts} refused")
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    def _matching(self, params) -> list[dict]:
        query = params.get("query") or {}
        docs = [
            copy.deepcopy(doc)
            for doc in self.docs.values()
            if all(doc.get(k) == v for k, v in query.items())
        ]
        sort = params.get("sort")
        if sort:
            key = sort[0]
            reverse = key.startswith("-")
            docs.sort(key=lambda d: d.get(key.lstrip("-")), reverse=reverse)
        return docs

    async def find(self, params):
        self.calls.append(("find", dict(params)))
        docs = self._matching(params)
        offset = params.get("offset") or 0
        limit = params.get("limit")
        return docs[offset:offset + limit] if limit else docs[offset:]

    async def count(self, params):
        self.calls.append(("count", dict(params)))
        return len(self._matching(params))

    async def find_by_id(self, entity_id):
        self.calls.append(("find_by_id", entity_id))
        doc = self.docs.get(entity_id)
        return copy.deepcopy(doc) if doc else None

    async def save(self, entity, meta):
        self.calls.append(("save", (entity, meta)))
        doc = dict(entity)
        doc.setdefault("_id", str(next(self._ids)))
        self.docs[doc["_id"]] = doc
        return copy.deepcopy(doc)

    async def update_by_id(self, entity, entity_id):
        self.calls.append(("update_by_id", (entity, entity_id)))
        if entity_id not in self.docs:
            return None
        doc = {**dict(entity), "_id": entity_id}
        self.docs[entity_id] = doc
        return copy.deepcopy(doc)

    async def remove_by_id(self, entity_id):
        self.calls.append(("remove_by_id", entity_id))
        return self.docs.pop(entity_id, None)


class MemoryCacher:
    """Cacher keeping entries in a dict; ``clean`` understands trailing ``*``."""

    def __init__(self):
        self.entries: dict[str, Any] = {}
        self.cleaned: list[str] = []

    async def get(self, key):
        return copy.deepcopy(self.entries.get(key))

    async def set(self, key, value, ttl=None):
        self.entries[key] = copy.deepcopy(value)

    async def clean(self, pattern):
        self.cleaned.append(pattern)
        prefix = pattern.rstrip("*")
        doomed = [k for k in self.entries if k.startswith(prefix)]
        for key in doomed:
            del self.entries[key]
        return len(doomed)


SAMPLE_FILES = [
    {"_id": "a1", "name": "alpha.txt", "size": 10, "owner": {"name": "ana", "email": "ana@example.com"}},
    {"_id": "b2", "name": "beta.txt", "size": 20, "owner": {"name": "bo", "email": "bo@example.com"}},
    {"_id": "c3", "name": "gamma.png", "size": 30, "owner": {"name": "ana", "email": "ana@example.com"}},
]


@pytest.fixture
def adapter():
    """Adapter seeded with three files."""
    return MemoryAdapter(SAMPLE_FILES)


@pytest.fixture
def cacher():
    return MemoryCacher()


@pytest.fixture
def service(adapter):
    """Unrestricted service without cache or publisher."""
    return EntityService("files", adapter, ServiceSettings(page_size=2), retry_delay=0.01)


@pytest.fixture
def client(adapter):
    """
    Test client for an app serving the ``files`` service.
    The lifespan connects the adapter before requests are made.
    """
    files = EntityService(
        "files",
        adapter,
        ServiceSettings(fields=["_id", "name", "size", "owner.name"], page_size=2),
        retry_delay=0.01,
    )
    app = create_app(files)

    with TestClient(app) as test_client:
        yield test_client
