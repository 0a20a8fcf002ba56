"""
Document post-processing.

Every document leaving the service passes through the same pipeline:

1. encode the identifier field (in place)
2. adapter ``after_retrieve_transform_id`` hook, if the adapter has one
3. relation population, when ``populate`` was requested
4. projection onto the authorized field list

A single document goes in and comes out as a single document; a list
stays a list. Anything else is returned untouched.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any, Callable

from shared.config.constants import Params
from shared.config.logging import get_logger
from shared.utils.awaitables import maybe_await
from entity_actions.services.crud.fields import FieldAuthorizer, filter_fields

logger = get_logger(__name__)

# populate(docs, relation_names, context) -> docs, sync or async
Populator = Callable[[list[Any], list[str], Any], Any]


def _identity(value: Any) -> Any:
    return value


class DocumentTransformer:
    """Applies ID encoding, adapter hooks, population and projection."""

    def __init__(
        self,
        *,
        id_field: str,
        authorizer: FieldAuthorizer,
        default_fields: list[str] | None = None,
        encode_id: Callable[[Any], Any] = _identity,
        adapter: Any = None,
        populator: Populator | None = None,
    ):
        self._id_field = id_field
        self._authorizer = authorizer
        self._default_fields = default_fields
        self._encode_id = encode_id
        self._adapter = adapter
        self._populator = populator

    async def transform(self, docs: Any, params: Mapping[str, Any], context: Any = None) -> Any:
        if isinstance(docs, Mapping):
            is_doc = True
            docs = [docs]
        elif isinstance(docs, (list, tuple)):
            is_doc = False
            docs = list(docs)
        else:
            return docs

        for doc in docs:
            self._encode_doc_id(doc)

        docs = await self._after_retrieve(docs)

        populate = params.get(Params.POPULATE)
        if populate:
            docs = await self._populate(docs, populate, context)

        fields = self.authorized_fields(params)
        docs = [filter_fields(doc, fields) for doc in docs]

        return docs[0] if is_doc else docs

    def authorized_fields(self, params: Mapping[str, Any]) -> list[str] | None:
        """Requested fields (or the configured default) reduced by the allow-list."""
        fields = params.get(Params.FIELDS) or self._default_fields

        # Legacy space-delimited form
        if isinstance(fields, str):
            fields = fields.split()

        return self._authorizer.authorize(fields)

    def _encode_doc_id(self, doc: Any) -> None:
        if isinstance(doc, MutableMapping) and self._id_field in doc:
            doc[self._id_field] = self._encode_id(doc[self._id_field])

    async def _after_retrieve(self, docs: list[Any]) -> list[Any]:
        hook = getattr(self._adapter, "after_retrieve_transform_id", None)
        if not callable(hook):
            return docs

        transformed = []
        for doc in docs:
            result = await maybe_await(hook(doc, self._id_field))
            # Hooks that edit the document in place may return None
            transformed.append(doc if result is None else result)
        return transformed

    async def _populate(self, docs: list[Any], populate: Any, context: Any) -> list[Any]:
        if self._populator is None:
            logger.warning("Populate requested but no populator is configured", populate=populate)
            return docs

        if isinstance(populate, str):
            populate = populate.replace(",", " ").split()

        result = await maybe_await(self._populator(docs, list(populate), context))
        return list(result)
