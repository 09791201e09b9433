"""
app/db/indexes.py

Purpose: Database index management

Every table in the registry gets:
- its unique indexes (email, transaction_id, ...)
- sparse unique indexes for optional codes (course_code, access_code)
- a lookup index per reference field
- created_at, the default sort key

OTPs expire through a TTL index on expires_at.
"""

from typing import Any, Dict, List, Tuple

from app.db.mongo import get_collection, get_otps_collection
from app.models.registry import TABLES, TableSpec
from app.core.logging import get_logger

logger = get_logger(__name__)

IndexDef = Tuple[List[Tuple[str, int]], Dict[str, Any]]


def index_plan(spec: TableSpec) -> List[IndexDef]:
    """
    (keys, options) pairs for one table; options always carry the index name.
    """
    plan: List[IndexDef] = []
    for fields in spec.unique_indexes:
        plan.append(([(f, 1) for f in fields], {"unique": True, "name": "_".join(fields) + "_unique"}))
    for field in spec.sparse_unique_indexes:
        plan.append(([(field, 1)], {"unique": True, "sparse": True, "name": f"{field}_unique"}))
    for field in spec.object_id_fields:
        plan.append(([(field, 1)], {"name": f"{field}_idx"}))
    plan.append(([("created_at", 1)], {"name": "created_at_idx"}))
    return plan


OTP_INDEXES: List[IndexDef] = [
    ([("email", 1), ("verified", 1)], {"name": "email_verified_idx"}),
    ([("expires_at", 1)], {"expireAfterSeconds": 0, "name": "otp_expiry_ttl_idx"}),
]


async def create_indexes():
    """
    Idempotent; re-running only creates what is missing.
    """
    try:
        for spec in TABLES.values():
            collection = get_collection(spec.collection)
            for keys, options in index_plan(spec):
                await collection.create_index(keys, **options)
            logger.debug(f"Indexes ensured on {spec.collection}")

        otps = get_otps_collection()
        for keys, options in OTP_INDEXES:
            await otps.create_index(keys, **options)

        logger.info(f"✅ Database indexes ensured for {len(TABLES)} tables")

    except Exception as e:
        logger.error(f"Failed to create indexes: {e}", exc_info=True)
        raise


async def missing_indexes() -> Dict[str, List[str]]:
    """
    Index names from the plan that the server does not have, per collection.
    """
    missing: Dict[str, List[str]] = {}
    for spec in TABLES.values():
        existing = await get_collection(spec.collection).index_information()
        absent = [options["name"] for _, options in index_plan(spec) if options["name"] not in existing]
        if absent:
            missing[spec.collection] = absent

    existing = await get_otps_collection().index_information()
    absent = [options["name"] for _, options in OTP_INDEXES if options["name"] not in existing]
    if absent:
        missing["otps"] = absent
    return missing
