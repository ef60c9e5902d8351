# collections_endpoints.py
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, HTTPException, Request

from persistence.disk_store import DurableStore
from persistence.errors import DuplicateRecordError, InvalidRecordError, UnknownCollectionError
from persistence.repositories import CollectionAccessor, create_model

router = APIRouter(prefix="/api", tags=["collections"])
logger = logging.getLogger(__name__)


def _model(request: Request, collection: str) -> CollectionAccessor:
    store: DurableStore = request.app.state.store
    try:
        return create_model(collection, store)
    except UnknownCollectionError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


def _bad_record(e: InvalidRecordError) -> HTTPException:
    detail: dict[str, Any] = {"error": str(e)}
    if e.errors:
        detail["fields"] = [{"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in e.errors]
    return HTTPException(status_code=422, detail=detail)


@router.get("/{collection}")
async def list_records(collection: str, request: Request) -> list[dict[str, Any]]:
    # Query-string filters are plain equality on string fields.
    query = dict(request.query_params)
    return await _model(request, collection).find(query)


@router.get("/{collection}/{record_id}")
async def get_record(collection: str, record_id: str, request: Request) -> dict[str, Any]:
    record = await _model(request, collection).find_by_id(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"{collection}/{record_id} not found")
    return record


@router.post("/{collection}", status_code=201)
async def create_record(
    collection: str,
    request: Request,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    model = _model(request, collection)
    try:
        return await model.create(payload)
    except DuplicateRecordError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except InvalidRecordError as e:
        raise _bad_record(e) from e


@router.patch("/{collection}/{record_id}")
async def update_record(
    collection: str,
    record_id: str,
    request: Request,
    payload: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    model = _model(request, collection)
    try:
        record = await model.find_by_id_and_update(record_id, payload)
    except InvalidRecordError as e:
        raise _bad_record(e) from e
    if record is None:
        raise HTTPException(status_code=404, detail=f"{collection}/{record_id} not found")
    return record


@router.delete("/{collection}/{record_id}")
async def delete_record(collection: str, record_id: str, request: Request) -> dict[str, str]:
    deleted = await _model(request, collection).find_by_id_and_delete(record_id)
    if deleted is None:
        raise HTTPException(status_code=404, detail=f"{collection}/{record_id} not found")
    logger.info("Deleted %s/%s via API", collection, record_id)
    return deleted
