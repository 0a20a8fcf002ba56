"""
Entity Service: the CRUD actions over a storage adapter.

An EntityService composes the building blocks of this package around one
injected adapter:

    caller -> ParamsNormalizer -> adapter -> DocumentTransformer -> caller
                                    |
    writes ------------------------ +-> ChangeNotifier (cache clean, hooks)

Usage:
    service = EntityService(
        "files",
        adapter=S3FileAdapter(bucket="uploads"),
        settings=ServiceSettings(fields=["_id", "name", "meta.size"], page_size=20),
        publisher=RedisEventPublisher(),
        cacher=RedisCacher(),
    )
    await service.start()
    page = await service.list({"page": "2", "sort": "name"})
    doc = await service.remove({"id": "a1"})

Subclasses may override ``encode_id``/``decode_id`` and define
``entity_created``/``entity_updated``/``entity_removed`` and
``after_connected`` methods; hooks passed to the constructor take
precedence over methods of the same name.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping

from pydantic import BaseModel, ValidationError as PydanticValidationError

from shared.config.constants import Actions, CACHE_KEYS, ChangeType, Params, change_hook_name
from shared.config.logging import get_logger
from shared.config.settings import settings as app_settings
from shared.infrastructure.cache import Cacher
from shared.infrastructure.correlation import get_request_id
from shared.infrastructure.events import EventPublisher, validate_service_name
from shared.infrastructure.redis.constants import get_action_cache_key
from shared.utils.exceptions import EntityNotFoundError, ValidationError
from entity_actions.schemas import FindParams, ListParams, ListResult, ServiceSettings
from entity_actions.services.connection import ConnectionManager
from entity_actions.services.crud import (
    DocumentTransformer,
    FieldAuthorizer,
    ParamsNormalizer,
    Populator,
    filter_fields,
    total_pages,
)
from entity_actions.services.events import ChangeHook, ChangeNotifier
from entity_actions.services.validation import build_entity_validator

logger = get_logger(__name__)

PARAM_SCHEMAS: dict[str, type[BaseModel]] = {
    Actions.FIND: FindParams,
    Actions.COUNT: FindParams,
    Actions.LIST: ListParams,
}


@dataclass
class ActionContext:
    """What hooks and populators learn about the call that triggered them."""

    service: str
    action: str
    params: Mapping[str, Any] = field(default_factory=dict)
    meta: Mapping[str, Any] = field(default_factory=dict)
    request_id: str | None = None


class EntityService:
    """CRUD actions for one kind of entity, backed by an injected adapter."""

    def __init__(
        self,
        name: str,
        adapter: Any,
        settings: ServiceSettings | Mapping[str, Any] | None = None,
        *,
        publisher: EventPublisher | None = None,
        cacher: Cacher | None = None,
        populator: Populator | None = None,
        hooks: Mapping[str, ChangeHook] | None = None,
        after_connected: Callable[[], Any] | None = None,
        retry_delay: float | None = None,
    ):
        validate_service_name(name)
        self.name = name
        self.adapter = adapter

        if not isinstance(settings, ServiceSettings):
            settings = ServiceSettings.model_validate(settings or {})
        self.settings = settings

        self._cacher = cacher
        self._validate = build_entity_validator(settings.entity_validator)

        self.normalizer = ParamsNormalizer(settings)
        self.authorizer = FieldAuthorizer(settings.fields)
        self.transformer = DocumentTransformer(
            id_field=settings.id_field,
            authorizer=self.authorizer,
            default_fields=settings.fields,
            encode_id=self.encode_id,
            adapter=adapter,
            populator=populator,
        )
        self.notifier = ChangeNotifier(
            name,
            publisher=publisher,
            cacher=cacher,
            hooks=self._collect_hooks(hooks),
        )
        self.connection = ConnectionManager(
            adapter,
            service=name,
            after_connected=after_connected or getattr(self, "after_connected", None),
            retry_delay=retry_delay,
        )

        init = getattr(adapter, "init", None)
        if callable(init):
            init(self)

    def _collect_hooks(self, hooks: Mapping[str, ChangeHook] | None) -> dict[str, ChangeHook]:
        collected = dict(hooks or {})
        for change_type in ChangeType.ALL:
            name = change_hook_name(change_type)
            method = getattr(self, name, None)
            if name not in collected and callable(method):
                collected[name] = method
        return collected

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> bool:
        """Connect the adapter, retrying until it is reachable."""
        return await self.connection.start()

    async def stop(self) -> None:
        await self.connection.stop()

    # =========================================================================
    # Actions
    # =========================================================================

    async def find(self, params: Mapping[str, Any] | None = None, ctx: Any = None) -> Any:
        """Documents matching the query, transformed and projected."""
        params = self.sanitize_params(params, Actions.FIND)
        ctx = self._context(ctx, Actions.FIND, params)
        return await self._cached(Actions.FIND, params, lambda: self._find(params, ctx))

    async def count(self, params: Mapping[str, Any] | None = None, ctx: Any = None) -> int:
        """Number of documents matching the query; pagination is ignored."""
        params = _without_pagination(self.sanitize_params(params, Actions.COUNT))
        return await self._cached(Actions.COUNT, params, lambda: self.adapter.count(params))

    async def list(self, params: Mapping[str, Any] | None = None, ctx: Any = None) -> ListResult:
        """One page of documents plus totals."""
        params = self.sanitize_params(params, Actions.LIST)
        ctx = self._context(ctx, Actions.LIST, params)
        return await self._cached(
            Actions.LIST, params, lambda: self._list(params, ctx), model=ListResult
        )

    async def get(self, params: Mapping[str, Any], ctx: Any = None) -> Any:
        """
        The entity stored under ``params["id"]``, as the adapter returns it.

        Raises:
            EntityNotFoundError: If the adapter has no such entity.
        """
        params = self.sanitize_params(params, Actions.GET)
        return await self._cached(Actions.GET, params, lambda: self._get(params.get(Params.ID)))

    async def save(self, entity: Any, meta: Mapping[str, Any] | None = None, ctx: Any = None) -> Any:
        """Store a new entity; returns the adapter's result unchanged."""
        meta = dict(meta or {})
        await self.validate_entity(entity)

        result = await self.adapter.save(entity, meta)

        ctx = self._context(ctx, Actions.SAVE, {}, meta)
        await self.entity_changed(ChangeType.CREATED, result, ctx)
        return result

    async def update(self, entity: Any, meta: Mapping[str, Any] | None = None, ctx: Any = None) -> Any:
        """
        Replace the entity whose id is carried by ``meta``.

        ``meta`` may only hold ``id`` or the configured id field.

        Raises:
            EntityNotFoundError: If ``meta`` holds any other key.
        """
        meta = dict(meta or {})
        entity_id = self._decode_meta_id(meta)
        await self.validate_entity(entity)

        result = await self.adapter.update_by_id(entity, entity_id)

        ctx = self._context(ctx, Actions.UPDATE, {}, meta)
        await self.entity_changed(ChangeType.UPDATED, result, ctx)
        return result

    async def remove(self, params: Mapping[str, Any], ctx: Any = None) -> Any:
        """
        Delete the entity stored under ``params["id"]``.

        Returns:
            The removed document, transformed.

        Raises:
            EntityNotFoundError: If the adapter removed nothing.
        """
        params = self.sanitize_params(params, Actions.REMOVE)
        ctx = self._context(ctx, Actions.REMOVE, params)
        requested_id = params.get(Params.ID)

        doc = await self.adapter.remove_by_id(self.decode_id(requested_id))
        if not doc:
            raise EntityNotFoundError(requested_id, service=self.name)

        json = await self.transform_documents(doc, params, ctx)
        await self.entity_changed(ChangeType.REMOVED, json, ctx)
        return json

    # =========================================================================
    # Action internals
    # =========================================================================

    async def _find(self, params: dict[str, Any], ctx: Any) -> Any:
        docs = await self.adapter.find(params)
        return await self.transform_documents(docs, params, ctx)

    async def _list(self, params: dict[str, Any], ctx: Any) -> ListResult:
        count_params = _without_pagination(params)

        # find and count run concurrently
        docs, total = await asyncio.gather(
            self.adapter.find(params),
            self.adapter.count(count_params),
        )
        rows = await self.transform_documents(docs, params, ctx)

        page_size = params[Params.PAGE_SIZE]
        return ListResult(
            rows=rows,
            total=total,
            page=params[Params.PAGE],
            page_size=page_size,
            total_pages=total_pages(total, page_size),
        )

    async def _get(self, requested_id: Any) -> Any:
        doc = await self.adapter.find_by_id(self.decode_id(requested_id))
        if not doc:
            raise EntityNotFoundError(requested_id, service=self.name)
        return doc

    def _decode_meta_id(self, meta: Mapping[str, Any]) -> Any:
        entity_id = None
        for key, value in meta.items():
            if key == Params.ID or key == self.settings.id_field:
                entity_id = self.decode_id(value)
            else:
                raise EntityNotFoundError(None, service=self.name, reason="No valid ID", key=key)
        return entity_id

    async def _cached(
        self,
        action: str,
        params: Mapping[str, Any],
        produce: Callable[[], Awaitable[Any]],
        model: type[BaseModel] | None = None,
    ) -> Any:
        """Serve a read action through the cacher, when one is configured."""
        if self._cacher is None or not app_settings.cache_enabled:
            return await produce()

        key = get_action_cache_key(self.name, action, params, CACHE_KEYS[action])
        cached = await self._cacher.get(key)
        if cached is not None:
            return model.model_validate(cached) if model is not None else cached

        result = await produce()
        if isinstance(result, BaseModel):
            await self._cacher.set(key, result.model_dump(by_alias=True))
        elif _is_cacheable(result):
            await self._cacher.set(key, result)
        return result

    def _context(
        self,
        ctx: Any,
        action: str,
        params: Mapping[str, Any],
        meta: Mapping[str, Any] | None = None,
    ) -> Any:
        if ctx is not None:
            return ctx
        return ActionContext(
            service=self.name,
            action=action,
            params=params,
            meta=meta or {},
            request_id=get_request_id() or None,
        )

    # =========================================================================
    # Building blocks (overridable)
    # =========================================================================

    def sanitize_params(self, params: Mapping[str, Any] | None, action: str) -> dict[str, Any]:
        """
        Normalized copy of ``params`` for ``action``.

        Raises:
            ValidationError: If a declared parameter is not a valid integer
                in range (``page`` >= 1; ``pageSize``, ``limit``, ``offset`` >= 0).
        """
        self.check_params(params, action)
        return self.normalizer.normalize(params, action)

    def check_params(self, params: Mapping[str, Any] | None, action: str) -> None:
        schema = PARAM_SCHEMAS.get(action)
        if schema is None or not params:
            return
        try:
            schema.model_validate(dict(params))
        except PydanticValidationError as e:
            raise ValidationError(
                "Parameters validation error!",
                data=[
                    {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
                    for err in e.errors()
                ],
                action=action,
            ) from e

    async def transform_documents(self, docs: Any, params: Mapping[str, Any], ctx: Any = None) -> Any:
        return await self.transformer.transform(docs, params, ctx)

    def authorize_fields(self, fields: list[str] | None) -> list[str] | None:
        return self.authorizer.authorize(fields)

    def filter_fields(self, doc: Any, fields: list[str] | None) -> Any:
        return filter_fields(doc, fields)

    async def validate_entity(self, entity: Any) -> Any:
        """Run the configured validator on a mapping payload (or each of a list)."""
        if self._validate is None:
            return entity

        entities = entity if isinstance(entity, list) else [entity]
        for item in entities:
            if isinstance(item, Mapping):
                await self._validate(item)
        return entity

    async def entity_changed(self, change_type: str, document: Any, ctx: Any = None) -> None:
        await self.notifier.notify(change_type, document, ctx)

    async def clear_cache(self) -> None:
        await self.notifier.clear_cache()

    def encode_id(self, entity_id: Any) -> Any:
        return entity_id

    def decode_id(self, entity_id: Any) -> Any:
        return entity_id


def _without_pagination(params: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in params.items() if k not in Params.PAGINATION}


def _is_cacheable(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple, str, int, float))
