"""
app/services/user_service.py

Purpose: User data management

- Account lookups by id, email, Telegram identity
- Profile and password updates
- Telegram linkage for the upload bot
- Public rendering (password never leaves this module)
"""

from app.db.mongo import get_collection
from app.core.exceptions import ConflictError, ResourceNotFoundError
from app.core.logging import get_logger, LogContext
from app.models.registry import get_table
from app.services.query_service import serialize_document
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
from typing import Optional, Dict, Any
from utils.time_utils import utc_now

logger = get_logger(__name__)

USER_TABLE = get_table("User")


def _users():
    return get_collection(USER_TABLE.collection)


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """
    Renders a raw user document for responses (id as string, no password).
    """
    return serialize_document(user, USER_TABLE.hidden_fields)


async def find_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    """
    Returns the raw user document, password hash included.
    """
    return await _users().find_one({"email": email.strip().lower()})


async def get_user_by_id(user_id: str) -> Optional[Dict[str, Any]]:
    """
    Retrieves a user by id.

    Returns:
        Public user dict or None if not found / id malformed
    """
    if not ObjectId.is_valid(user_id):
        return None
    user = await _users().find_one({"_id": ObjectId(user_id)})
    return public_user(user) if user else None


async def find_user_by_telegram(username: Optional[str], telegram_user_id: Optional[int]) -> Optional[Dict[str, Any]]:
    """
    Identifies a bot user: by Telegram username first, then by Telegram user id.
    """
    users = _users()
    if username:
        user = await users.find_one({"telegram.username": username})
        if user:
            return user
    if telegram_user_id is not None:
        return await users.find_one({"telegram.user_id": telegram_user_id})
    return None


async def link_telegram(user: Dict[str, Any], telegram_user_id: int, chat_id: int, username: Optional[str]) -> bool:
    """
    Stores the Telegram identity on the user when it is missing or stale.

    Returns:
        True if the document changed
    """
    current = user.get("telegram") or {}
    if current.get("user_id") == telegram_user_id and current.get("chat_id") == chat_id:
        return False

    with LogContext(user_id=str(user["_id"]), telegram_user_id=telegram_user_id):
        await _users().update_one(
            {"_id": user["_id"]},
            {
                "$set": {
                    "telegram.user_id": telegram_user_id,
                    "telegram.chat_id": chat_id,
                    "telegram.username": username or current.get("username"),
                    "telegram.linked_at": utc_now(),
                    "updated_at": utc_now(),
                }
            },
        )
        logger.info("Telegram account linked")
        return True


async def update_password(email: str, hashed_password: str) -> bool:
    result = await _users().update_one(
        {"email": email.strip().lower()},
        {"$set": {"password": hashed_password, "updated_at": utc_now()}},
    )
    return result.matched_count > 0


async def update_profile(user_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Applies profile changes and returns the updated public user.

    Raises:
        ResourceNotFoundError: no such user
        ConflictError: the new email belongs to another account
    """
    changes = dict(changes)
    if "email" in changes:
        changes["email"] = changes["email"].strip().lower()
    changes["updated_at"] = utc_now()

    with LogContext(user_id=user_id):
        try:
            user = await _users().find_one_and_update(
                {"_id": ObjectId(user_id)},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ConflictError("An account with this email already exists")

        if not user:
            raise ResourceNotFoundError("User not found")

        logger.info(f"Profile updated: {sorted(k for k in changes if k != 'password')}")
        return public_user(user)


async def delete_user(user_id: str) -> bool:
    result = await _users().delete_one({"_id": ObjectId(user_id)})
    if result.deleted_count:
        logger.info(f"User {user_id} deleted")
    return result.deleted_count > 0
