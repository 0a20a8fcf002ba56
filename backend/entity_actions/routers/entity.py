"""
REST binding of an entity service.

Routes (relative to the router prefix, ``/<service>`` by default):

    GET    /find     -> find
    GET    /count    -> count
    GET    /         -> list
    GET    /{id}     -> get
    POST   /         -> save    (JSON body, or the raw body as a stream)
    PUT    /{id}     -> update
    DELETE /{id}     -> remove

Query string values are passed through as strings; the service
normalizes them. ``query`` is the one exception: it carries a JSON
object and is decoded here.

Usage:
    app.include_router(build_entity_router(files_service))
"""

import json
from collections.abc import AsyncIterable
from typing import Any

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import StreamingResponse

from shared.config.constants import Params
from shared.utils.exceptions import ValidationError
from entity_actions.schemas import ErrorResponse, ListResult
from entity_actions.services.base_service import ActionContext, EntityService

JSON_MEDIA_TYPE = "application/json"
STREAM_MEDIA_TYPE = "application/octet-stream"


def query_params(request: Request) -> dict[str, Any]:
    """Action parameters from the query string."""
    params: dict[str, Any] = dict(request.query_params)

    raw_query = params.get(Params.QUERY)
    if raw_query is not None:
        try:
            params[Params.QUERY] = json.loads(raw_query)
        except json.JSONDecodeError as e:
            raise ValidationError("Invalid query parameter", data=str(e)) from e

    return params


def _to_response(result: Any) -> Any:
    """Binary results are streamed back; everything else is JSON."""
    if isinstance(result, (bytes, bytearray)):
        return Response(content=bytes(result), media_type=STREAM_MEDIA_TYPE)
    if isinstance(result, AsyncIterable):
        return StreamingResponse(result, media_type=STREAM_MEDIA_TYPE)
    return result


def build_entity_router(service: EntityService, prefix: str | None = None) -> APIRouter:
    """Router exposing the seven actions of ``service``."""
    router = APIRouter(
        prefix=prefix if prefix is not None else f"/{service.name}",
        tags=[service.name],
        responses={
            404: {"model": ErrorResponse},
            422: {"model": ErrorResponse},
        },
    )

    def context(request: Request, action: str, params: dict[str, Any], meta: dict[str, Any] | None = None):
        return ActionContext(
            service=service.name,
            action=action,
            params=params,
            meta=meta or {},
            request_id=getattr(request.state, "request_id", None),
        )

    # /find and /count are declared before /{id} so they are not read as ids

    @router.get("/find")
    async def find_entities(request: Request, params: dict = Depends(query_params)):
        """Documents matching the query."""
        return await service.find(params, context(request, "find", params))

    @router.get("/count", response_model=int)
    async def count_entities(request: Request, params: dict = Depends(query_params)) -> int:
        """Number of documents matching the query."""
        return await service.count(params, context(request, "count", params))

    @router.get("/", response_model=ListResult, response_model_by_alias=True)
    async def list_entities(request: Request, params: dict = Depends(query_params)) -> ListResult:
        """One page of documents with totals."""
        return await service.list(params, context(request, "list", params))

    @router.get("/{id}")
    async def get_entity(id: str, request: Request, params: dict = Depends(query_params)):
        """A single entity, streamed when the adapter returns binary content."""
        params[Params.ID] = id
        return _to_response(await service.get(params, context(request, "get", params)))

    @router.post("/", status_code=status.HTTP_201_CREATED)
    async def save_entity(request: Request, params: dict = Depends(query_params)):
        """Store a new entity. Non-JSON bodies are handed to the adapter as a stream."""
        content_type = request.headers.get("content-type", "")
        if content_type.startswith(JSON_MEDIA_TYPE):
            entity = await request.json()
        else:
            entity = request.stream()

        result = await service.save(entity, params, context(request, "save", {}, params))
        return _to_response(result)

    @router.put("/{id}")
    async def update_entity(id: str, request: Request):
        """Replace the entity stored under ``id``."""
        content_type = request.headers.get("content-type", "")
        if content_type.startswith(JSON_MEDIA_TYPE):
            entity = await request.json()
        else:
            entity = request.stream()

        meta = {Params.ID: id}
        result = await service.update(entity, meta, context(request, "update", {}, meta))
        return _to_response(result)

    @router.delete("/{id}")
    async def remove_entity(id: str, request: Request, params: dict = Depends(query_params)):
        """Delete an entity and return it."""
        params[Params.ID] = id
        return await service.remove(params, context(request, "remove", params))

    return router
