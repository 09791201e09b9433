"""
app/services/query_service.py

Purpose: Generic CRUD over every registered table

- Create / bulk create with schema validation and timestamps
- Condition translation (id -> _id, hex strings -> ObjectId)
- Paginated regex search and find-and-count
- Update / delete by condition
- Populate a named relation (forward or reverse reference)
"""

import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union, get_args, get_origin

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import BulkWriteError, DuplicateKeyError

from app.core.errors import validation_problems
from app.core.exceptions import ConflictError, ValidationError
from app.core.logging import get_logger, LogContext
from app.db.mongo import get_collection
from app.models.registry import TABLES, Relation, TableSpec, get_table
from utils.time_utils import parse_date, utc_now

logger = get_logger(__name__)

DEFAULT_SORT: List[Tuple[str, int]] = [("created_at", DESCENDING)]
DUPLICATE_KEY_CODE = 11000

# Never written from client payloads
PROTECTED_FIELDS = ("_id", "id", "created_at")


# ==============================================
# CONVERSION HELPERS
# ==============================================

def _to_object_id(value: Any) -> Any:
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    if isinstance(value, list):
        return [_to_object_id(v) for v in value]
    if isinstance(value, dict):
        # Operator documents such as {"$in": [...]}
        return {k: _to_object_id(v) for k, v in value.items()}
    return value


def _coerce_ids(spec: TableSpec, data: Dict[str, Any]) -> Dict[str, Any]:
    for key in ("_id",) + spec.object_id_fields:
        if key in data and data[key] is not None:
            data[key] = _to_object_id(data[key])
    return data


# Condition keys that are never cast against the schema
_PASSTHROUGH_KEYS = ("_id",)

_condition_adapters: Dict[Tuple[str, str], Optional[TypeAdapter]] = {}


def _scalar_type(annotation: Any) -> Any:
    """Optional[X] -> X, List[X] -> X; a list field is filtered by element."""
    if get_origin(annotation) is Union:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            annotation = args[0]
    if get_origin(annotation) in (list, tuple, set):
        args = get_args(annotation)
        annotation = args[0] if args else Any
    return annotation


def _condition_adapter(spec: TableSpec, key: str) -> Optional[TypeAdapter]:
    cache_key = (spec.name, key)
    if cache_key not in _condition_adapters:
        target = _scalar_type(spec.schema.model_fields[key].annotation)
        if isinstance(target, type) and issubclass(target, BaseModel):
            _condition_adapters[cache_key] = None
        else:
            _condition_adapters[cache_key] = TypeAdapter(
                target, config=ConfigDict(arbitrary_types_allowed=True)
            )
    return _condition_adapters[cache_key]


def _cast_condition(spec: TableSpec, query: Dict[str, Any]) -> Dict[str, Any]:
    """
    Casts plain values ("true", "499", "2025-01-01") to the field's schema
    type. Operator documents, id fields and dotted paths are left alone.

    Raises:
        ValidationError: unknown field, or a value the field type rejects
    """
    fields = spec.schema.model_fields
    problems = []
    for key, value in query.items():
        if key.startswith("$") or key in _PASSTHROUGH_KEYS:
            continue
        if key.split(".", 1)[0] not in fields:
            problems.append({"field": key, "message": f"Unknown field for {spec.name}"})
            continue
        if "." in key or key in spec.object_id_fields or isinstance(value, (dict, list)) or value is None:
            continue

        adapter = _condition_adapter(spec, key)
        if adapter is None:
            continue
        try:
            query[key] = adapter.validate_python(value)
        except PydanticValidationError as e:
            problems.append({"field": key, "message": e.errors()[0]["msg"]})

    if problems:
        raise ValidationError(f"Invalid {spec.name} filter", details=problems)
    return query


def build_condition(spec: TableSpec, cond: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Translates a client condition into a Mongo filter.

    `id` becomes `_id`. An id that is not a valid ObjectId is kept as a
    plain string, so it matches nothing instead of widening the filter.
    Other values are cast to their schema type.
    """
    query = dict(cond or {})
    if "id" in query:
        query["_id"] = query.pop("id")
    return _coerce_ids(spec, _cast_condition(spec, query))


def build_sort(order: Optional[Sequence[Sequence[str]]]) -> List[Tuple[str, int]]:
    """
    Converts [["field", "ASC"|"DESC"], ...] into a pymongo sort list.
    Anything other than "ASC" sorts descending.
    """
    if not order:
        return list(DEFAULT_SORT)

    sort = []
    for item in order:
        if not item:
            continue
        field = "_id" if item[0] == "id" else item[0]
        direction = str(item[1]).upper() if len(item) > 1 else "DESC"
        sort.append((field, ASCENDING if direction == "ASC" else DESCENDING))
    return sort or list(DEFAULT_SORT)


def _plain(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return serialize_document(value)
    return value


def serialize_document(doc: Dict[str, Any], hidden: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Renders a raw document: `_id` -> string `id`, ObjectIds -> strings.
    """
    result = {}
    for key, value in doc.items():
        if key in hidden:
            continue
        if key == "_id":
            result["id"] = _plain(value)
        else:
            result[key] = _plain(value)
    return result


def _render(spec: TableSpec, doc: Dict[str, Any]) -> Dict[str, Any]:
    return serialize_document(doc, spec.hidden_fields)


def _validate(spec: TableSpec, payload: Dict[str, Any]) -> Dict[str, Any]:
    data = {
        key: (None if value == "" else value)
        for key, value in payload.items()
        if key not in PROTECTED_FIELDS
    }
    _coerce_ids(spec, data)

    try:
        document = spec.schema(**data)
    except PydanticValidationError as e:
        raise ValidationError(f"{spec.name} validation failed", details=validation_problems(e.errors()))

    record = document.model_dump()
    now = utc_now()
    record["created_at"] = now
    record["updated_at"] = now
    return record


def _storable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, list):
        return [_storable(v) for v in value]
    return value


def _validate_patch(spec: TableSpec, patch: Dict[str, Any]) -> Dict[str, Any]:
    """
    Checks each patched field on its own: type, constraints and field
    validators apply, missing fields are not required. Empty strings
    become None, as on create. Keys outside the schema are dropped;
    dotted paths are kept when their root field exists.

    Raises:
        ValidationError: a patched value was rejected
    """
    fields = spec.schema.model_fields
    changes = {
        key: (None if value == "" else value)
        for key, value in patch.items()
        if key not in PROTECTED_FIELDS and key.split(".", 1)[0] in fields
    }
    _coerce_ids(spec, changes)

    holder = spec.schema.model_construct()
    validator = spec.schema.__pydantic_validator__
    problems = []
    for key, value in changes.items():
        if "." in key:
            continue
        try:
            validator.validate_assignment(holder, key, value)
        except PydanticValidationError as e:
            problems.extend(validation_problems(e.errors()))
            continue
        changes[key] = _storable(holder.__dict__[key])

    if problems:
        raise ValidationError(f"{spec.name} validation failed", details=problems)
    return changes


def _duplicate_key(e: Exception) -> Optional[Dict[str, Any]]:
    details = getattr(e, "details", None) or {}
    if isinstance(e, BulkWriteError):
        for write_error in details.get("writeErrors", []):
            if write_error.get("code") == DUPLICATE_KEY_CODE:
                return write_error.get("keyValue") or {}
        return None
    return details.get("keyValue") or {}


# ==============================================
# CREATE
# ==============================================

async def create(table: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validates and inserts one document.

    Raises:
        ResourceNotFoundError: unknown table
        ValidationError: schema rejected the payload
        ConflictError: a unique index was violated
    """
    spec = get_table(table)
    with LogContext(table=spec.name):
        record = _validate(spec, payload)

        try:
            result = await get_collection(spec.collection).insert_one(record)
        except DuplicateKeyError as e:
            logger.info(f"Duplicate {spec.name} rejected")
            raise ConflictError(details=_duplicate_key(e))

        record["_id"] = result.inserted_id
        logger.debug(f"Created {spec.name} {result.inserted_id}")
        return _render(spec, record)


async def bulk_create(table: str, payloads: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    spec = get_table(table)
    if not payloads:
        raise ValidationError("At least one record is required")

    records = [_validate(spec, payload) for payload in payloads]

    try:
        result = await get_collection(spec.collection).insert_many(records)
    except (BulkWriteError, DuplicateKeyError) as e:
        key_value = _duplicate_key(e)
        if key_value is None:
            raise
        raise ConflictError(details=key_value)

    for record, inserted_id in zip(records, result.inserted_ids):
        record["_id"] = inserted_id
    logger.info(f"Inserted {len(records)} {spec.name} records")
    return [_render(spec, record) for record in records]


# ==============================================
# READ
# ==============================================

async def get_one(table: str, cond: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    spec = get_table(table)
    doc = await get_collection(spec.collection).find_one(build_condition(spec, cond))
    return _render(spec, doc) if doc else None


def _apply_date_filter(cond: Dict[str, Any]) -> Dict[str, Any]:
    field_name = cond.pop("field_name", None)
    field_value = cond.pop("field_value", None)
    if field_name and "date" in field_name.lower():
        since = parse_date(field_value)
        if since is None:
            raise ValidationError(f"'{field_value}' is not a valid date")
        cond[field_name] = {"$gte": since}
    return cond


async def _find_raw(spec: TableSpec, query: Dict[str, Any], **kwargs) -> List[Dict[str, Any]]:
    cursor = get_collection(spec.collection).find(query, kwargs.get("projection"))
    cursor = cursor.sort(kwargs.get("sort") or DEFAULT_SORT)
    if kwargs.get("skip"):
        cursor = cursor.skip(kwargs["skip"])
    if kwargs.get("limit"):
        cursor = cursor.limit(kwargs["limit"])
    return await cursor.to_list(length=None)


async def get_all(table: str, cond: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    """
    Returns every matching document, newest first.

    `field_name`/`field_value` in the condition turn into a
    "field >= date" filter when the field name contains "date".
    """
    spec = get_table(table)
    query = build_condition(spec, _apply_date_filter(dict(cond or {})))
    docs = await _find_raw(spec, query)
    return [_render(spec, doc) for doc in docs]


async def get_all_by_attr(table: str, fields: List[str], cond: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    spec = get_table(table)
    projection = {f: 1 for f in fields if f not in spec.hidden_fields}
    docs = await _find_raw(spec, build_condition(spec, cond), projection=projection)
    return [_render(spec, doc) for doc in docs]


async def search(
    table: str,
    cond: Optional[Dict[str, Any]] = None,
    page: int = 0,
    page_size: int = 50,
    order: Optional[Sequence[Sequence[str]]] = None,
) -> Dict[str, Any]:
    """
    Paginated search.

    `filter` is matched case-insensitively (as literal text) against each of
    the `fields`; the remaining keys are equality conditions.

    Returns:
        {"rows": [...], "count": total matches ignoring pagination}
    """
    spec = get_table(table)
    cond = dict(cond or {})
    text = cond.pop("filter", None)
    fields = cond.pop("fields", None) or []
    if isinstance(fields, str):
        fields = [f.strip() for f in fields.split(",") if f.strip()]

    query = build_condition(spec, cond)
    if text and fields:
        pattern = re.escape(str(text))
        query["$or"] = [{f: {"$regex": pattern, "$options": "i"}} for f in fields]

    page = max(int(page), 0)
    page_size = max(int(page_size), 1)

    collection = get_collection(spec.collection)
    count = await collection.count_documents(query)
    docs = await _find_raw(
        spec, query, sort=build_sort(order), skip=page * page_size, limit=page_size
    )
    return {"rows": [_render(spec, doc) for doc in docs], "count": count}


async def find_and_count(
    table: str,
    cond: Optional[Dict[str, Any]] = None,
    order: Optional[Sequence[Sequence[str]]] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> Dict[str, Any]:
    spec = get_table(table)
    query = build_condition(spec, cond)
    count = await get_collection(spec.collection).count_documents(query)
    docs = await _find_raw(spec, query, sort=build_sort(order), skip=offset, limit=limit)
    return {"rows": [_render(spec, doc) for doc in docs], "count": count}


# ==============================================
# UPDATE / DELETE
# ==============================================

async def update(table: str, cond: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, int]:
    """
    $set the patch on every matching document.

    Returns:
        {"matched_count", "modified_count"}
    """
    spec = get_table(table)
    changes = _validate_patch(spec, patch)
    changes["updated_at"] = utc_now()

    with LogContext(table=spec.name):
        try:
            result = await get_collection(spec.collection).update_many(
                build_condition(spec, cond), {"$set": changes}
            )
        except DuplicateKeyError as e:
            raise ConflictError(details=_duplicate_key(e))

        logger.debug(
            f"Updated {spec.name}: matched={result.matched_count} modified={result.modified_count}"
        )
        return {"matched_count": result.matched_count, "modified_count": result.modified_count}


async def delete(table: str, cond: Dict[str, Any]) -> Dict[str, int]:
    spec = get_table(table)
    result = await get_collection(spec.collection).delete_many(build_condition(spec, cond))
    logger.info(f"Deleted {result.deleted_count} {spec.name} records")
    return {"deleted_count": result.deleted_count}


# ==============================================
# POPULATE
# ==============================================

def _ids_of(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return [v for v in value if v is not None]
    return [value]


async def _resolve(spec: TableSpec, docs: List[Dict[str, Any]], name: str, relation: Relation) -> None:
    target = TABLES[relation.target]
    collection = get_collection(target.collection)

    if relation.reverse:
        parent_ids = [doc["_id"] for doc in docs]
        children = await collection.find(
            {relation.foreign_field: {"$in": parent_ids}}
        ).to_list(length=None)
        grouped: Dict[Any, List[Dict[str, Any]]] = {}
        for child in children:
            grouped.setdefault(child.get(relation.foreign_field), []).append(
                _render(target, child)
            )
        for doc in docs:
            doc[name] = grouped.get(doc["_id"], [])
        return

    wanted = {i for doc in docs for i in _ids_of(doc.get(relation.local_field))}
    found = await collection.find({"_id": {"$in": list(wanted)}}).to_list(length=None)
    by_id = {item["_id"]: _render(target, item) for item in found}

    for doc in docs:
        value = doc.get(relation.local_field)
        if isinstance(value, list):
            doc[relation.local_field] = [by_id.get(v, v) for v in value]
        elif value is not None:
            doc[relation.local_field] = by_id.get(value, value)


def _relation_names(relations: Union[str, Sequence[str], None]) -> List[str]:
    if not relations:
        return []
    if isinstance(relations, str):
        relations = relations.split(",")
    return [name.strip() for name in relations if name and name.strip()]


async def _populate(spec: TableSpec, docs: List[Dict[str, Any]], relation_name: Optional[str]) -> List[Dict[str, Any]]:
    """
    Resolves `relation_name` in place.
    Unknown relations and lookup failures leave the documents unpopulated.
    """
    if not docs or not relation_name:
        return docs

    relation = spec.get_relation(relation_name)
    if relation is None:
        logger.warning(
            f"Failed to populate {relation_name} on {spec.name}: unknown relation"
        )
        return docs

    try:
        await _resolve(spec, docs, relation_name, relation)
    except Exception as e:
        logger.warning(
            f"Failed to populate {relation_name} on {spec.name}: {e}"
        )
    return docs


async def get_all_with_relation(
    table: str,
    cond: Optional[Dict[str, Any]],
    relations: Union[str, Sequence[str], None],
) -> List[Dict[str, Any]]:
    """
    get_all plus populated relations ("user_id,course_id" or a list of names).
    """
    spec = get_table(table)
    query = build_condition(spec, _apply_date_filter(dict(cond or {})))
    docs = await _find_raw(spec, query)
    for name in _relation_names(relations):
        docs = await _populate(spec, docs, name)
    return [_render(spec, doc) for doc in docs]


async def get_one_with_relation(
    table: str,
    cond: Optional[Dict[str, Any]],
    relations: Union[str, Sequence[str], None],
) -> Optional[Dict[str, Any]]:
    spec = get_table(table)
    doc = await get_collection(spec.collection).find_one(build_condition(spec, cond))
    if not doc:
        return None
    docs = [doc]
    for name in _relation_names(relations):
        docs = await _populate(spec, docs, name)
    return _render(spec, docs[0])
