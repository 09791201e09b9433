"""
app/api/query.py

Purpose: Generic CRUD routes for every registered table

- Mounted last, under /api/{table_name}
- Resolves the table name (case-insensitive, aliases, plurals)
- Delegates to the query service and wraps results in the envelope
"""

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse
from typing import Any, Dict, List, Optional

from app.core.exceptions import ResourceNotFoundError
from app.core.logging import get_logger, LogContext
from app.models.registry import normalize_table_name
from app.schemas.query import SearchRequest
from app.schemas.response import prepare_response
from app.services import query_service
from utils.constants import (
    MSG_ADDED,
    MSG_DELETED,
    MSG_FETCHED,
    MSG_NOT_FOUND,
    MSG_UPDATED,
    STATUS_CREATED,
    STATUS_OK,
)

logger = get_logger(__name__)
router = APIRouter()

# Query parameter that selects a relation to populate instead of filtering
POPULATE_PARAM = "populate"


def _query_condition(request: Request) -> Dict[str, Any]:
    return {k: v for k, v in request.query_params.items() if k != POPULATE_PARAM}


@router.post("/create", status_code=201)
async def create_record(table_name: str, payload: Dict[str, Any] = Body(...)):
    table = normalize_table_name(table_name)
    with LogContext(table=table):
        logger.info(f"Creating {table} record")
        record = await query_service.create(table, payload)
    return JSONResponse(status_code=201, content=prepare_response(STATUS_CREATED, MSG_ADDED, record))


@router.post("/insert-many", status_code=201)
async def insert_many(table_name: str, payloads: List[Dict[str, Any]] = Body(...)):
    table = normalize_table_name(table_name)
    records = await query_service.bulk_create(table, payloads)
    return JSONResponse(status_code=201, content=prepare_response(STATUS_CREATED, MSG_ADDED, records))


@router.get("/get-all-record")
async def get_all_records(table_name: str, request: Request):
    """
    Query parameters become equality conditions. `field_name`/`field_value`
    add a "date field >= value" filter; `populate` names a relation.
    """
    table = normalize_table_name(table_name)
    cond = _query_condition(request)
    relation = request.query_params.get(POPULATE_PARAM)

    if relation:
        rows = await query_service.get_all_with_relation(table, cond, relation)
    else:
        rows = await query_service.get_all(table, cond)
    return prepare_response(STATUS_OK, MSG_FETCHED, rows)


@router.post("/get-all-record-with-belongs-to")
async def get_all_with_belongs_to(table_name: str, body: Dict[str, Any] = Body(default_factory=dict)):
    table = normalize_table_name(table_name)
    cond = dict(body)
    relation = cond.pop("second_table", None) or cond.pop("secondTable", None)

    rows = await query_service.get_all_with_relation(table, cond, relation)
    return prepare_response(STATUS_OK, MSG_FETCHED, rows)


@router.patch("/update-record/{record_id}")
async def update_record(table_name: str, record_id: str, patch: Dict[str, Any] = Body(...)):
    table = normalize_table_name(table_name)
    with LogContext(table=table):
        result = await query_service.update(table, {"id": record_id}, patch)

        if result["matched_count"] == 0:
            logger.warning(f"No {table} found with id {record_id}")
            raise ResourceNotFoundError(MSG_NOT_FOUND)

    return prepare_response(STATUS_OK, MSG_UPDATED, result)


@router.delete("/delete-record/{record_id}")
async def delete_record(table_name: str, record_id: str):
    table = normalize_table_name(table_name)
    result = await query_service.delete(table, {"id": record_id})

    if result["deleted_count"] == 0:
        logger.warning(f"No {table} found with id {record_id}")
        raise ResourceNotFoundError(MSG_NOT_FOUND)

    return prepare_response(STATUS_OK, MSG_DELETED, result)


@router.get("/get-one-record/{record_id}")
async def get_one_record(table_name: str, record_id: str, populate: Optional[str] = None):
    table = normalize_table_name(table_name)
    if populate:
        record = await query_service.get_one_with_relation(table, {"id": record_id}, populate)
    else:
        record = await query_service.get_one(table, {"id": record_id})

    if record is None:
        raise ResourceNotFoundError(MSG_NOT_FOUND)
    return prepare_response(STATUS_OK, MSG_FETCHED, record)


@router.get("/search-one-record")
async def search_one_record(table_name: str, request: Request):
    """
    First record matching the query parameters (null when none does).
    """
    table = normalize_table_name(table_name)
    cond = _query_condition(request)
    relation = request.query_params.get(POPULATE_PARAM)

    if relation:
        record = await query_service.get_one_with_relation(table, cond, relation)
    else:
        record = await query_service.get_one(table, cond)
    return prepare_response(STATUS_OK, MSG_FETCHED, record)


@router.post("/search-record")
async def search_records(table_name: str, body: SearchRequest = Body(default_factory=SearchRequest)):
    table = normalize_table_name(table_name)
    with LogContext(table=table):
        result = await query_service.search(
            table, body.data, page=body.page, page_size=body.page_size, order=body.order
        )
        logger.debug(f"Search matched {result['count']} rows")
    return prepare_response(STATUS_OK, MSG_FETCHED, result)
