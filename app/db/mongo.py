"""
app/db/mongo.py

Purpose: MongoDB access

- One Motor client per process, opened in the app lifespan
- Collections resolved by name (table registry decides the names)
- OTP collection and the GridFS "uploads" bucket
"""

import asyncio
from typing import Any, Dict, Optional

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorDatabase,
    AsyncIOMotorCollection,
    AsyncIOMotorGridFSBucket,
)
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

UPLOADS_BUCKET = "uploads"
OTP_COLLECTION = "otps"

# Seconds to wait before each reconnect attempt
RETRY_DELAYS = (2, 4)

_client: Optional[AsyncIOMotorClient] = None
_database: Optional[AsyncIOMotorDatabase] = None


def _client_options() -> Dict[str, Any]:
    return {
        "maxPoolSize": 50,
        "minPoolSize": 5,
        "serverSelectionTimeoutMS": 10000,
        "connectTimeoutMS": 10000,
        "socketTimeoutMS": 45000,
        "retryWrites": True,
        "retryReads": True,
    }


async def _open_client() -> AsyncIOMotorClient:
    client = AsyncIOMotorClient(settings.MONGODB_URL, **_client_options())
    try:
        await client.admin.command("ping")
    except (ConnectionFailure, ServerSelectionTimeoutError):
        client.close()
        raise
    return client


async def connect_to_mongo():
    """
    Opens the client, retrying on connection failures.

    Raises:
        ConnectionError: every attempt failed
    """
    global _client, _database

    if _client is not None:
        logger.warning("MongoDB client already initialized")
        return

    attempts = len(RETRY_DELAYS) + 1
    for attempt in range(1, attempts + 1):
        try:
            _client = await _open_client()
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error(f"MongoDB unreachable (attempt {attempt}/{attempts}): {e}")
            if attempt == attempts:
                raise ConnectionError("Could not establish MongoDB connection") from e
            await asyncio.sleep(RETRY_DELAYS[attempt - 1])
            continue

        _database = _client[settings.MONGODB_DB_NAME]
        logger.info(f"✅ Connected to MongoDB database '{settings.MONGODB_DB_NAME}'")
        return


async def close_mongo_connection():
    global _client, _database

    if _client is None:
        return
    _client.close()
    _client = None
    _database = None
    logger.info("MongoDB connection closed")


async def check_database_health() -> bool:
    if _client is None:
        logger.error("MongoDB client not initialized")
        return False

    try:
        await _client.admin.command("ping")
    except Exception as e:
        logger.error(f"Database ping failed: {e}")
        return False
    return True


def get_database() -> AsyncIOMotorDatabase:
    """
    Raises:
        RuntimeError: connect_to_mongo() has not run
    """
    if _database is None:
        raise RuntimeError("Database not initialized. Call connect_to_mongo() during startup.")
    return _database


def get_collection(name: str) -> AsyncIOMotorCollection:
    """Collection by its MongoDB name, e.g. "courses"."""
    return get_database()[name]


def get_otps_collection() -> AsyncIOMotorCollection:
    """
    One document per pending code:
    email (lowercased), otp, data (signup payload or None),
    expires_at, verified, created_at.
    """
    return get_collection(OTP_COLLECTION)


def get_gridfs_bucket() -> AsyncIOMotorGridFSBucket:
    """Documents uploaded through /auth/upload-doc."""
    return AsyncIOMotorGridFSBucket(get_database(), bucket_name=UPLOADS_BUCKET)
