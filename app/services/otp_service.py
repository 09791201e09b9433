"""
app/services/otp_service.py

Purpose: One-time password storage and verification

- At most one pending OTP per email (new codes replace old ones)
- Single-use verification that hands back the stored payload
- Expired OTP purge for the maintenance loop

Verification attempts are not rate limited.
"""

import secrets
from typing import Any, Dict, Optional

from pymongo import ReturnDocument

from app.core.config import settings
from app.core.logging import get_logger, LogContext
from app.db.mongo import get_otps_collection
from app.models.otp import OTPRecord
from utils.time_utils import calculate_otp_expiry, utc_now

logger = get_logger(__name__)

OTP_LENGTH = 6


def generate_otp(length: int = OTP_LENGTH) -> str:
    """
    Returns a random numeric code, zero padded.
    """
    return "".join(secrets.choice("0123456789") for _ in range(length))


async def store_otp(
    email: str,
    code: str,
    data: Optional[Dict[str, Any]] = None,
    ttl_minutes: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Stores a new OTP, replacing any unverified one for the same email.
    """
    record = OTPRecord(
        email=email,
        otp=code,
        data=data,
        expires_at=calculate_otp_expiry(ttl_minutes or settings.OTP_EXPIRY_MINUTES),
    )

    with LogContext(email=record.email):
        otps = get_otps_collection()
        await otps.delete_many({"email": record.email, "verified": False})

        document = record.model_dump()
        await otps.insert_one(document)
        logger.info("OTP stored")
        return document


async def verify_otp(email: str, code: str) -> Optional[Dict[str, Any]]:
    """
    Consumes a matching, unexpired, unverified OTP.

    Returns:
        The stored payload ({} when none was stored), or None when the code
        is wrong, expired or already used.
    """
    email = email.strip().lower()

    with LogContext(email=email):
        record = await get_otps_collection().find_one_and_update(
            {
                "email": email,
                "otp": str(code),
                "verified": False,
                "expires_at": {"$gt": utc_now()},
            },
            {"$set": {"verified": True}},
            return_document=ReturnDocument.AFTER,
        )

        if not record:
            logger.info("OTP verification failed")
            return None

        logger.info("OTP verified")
        return record.get("data") or {}


async def delete_otps(email: str) -> int:
    result = await get_otps_collection().delete_many({"email": email.strip().lower()})
    return result.deleted_count


async def cleanup_expired_otps() -> int:
    """
    Deletes OTPs past their expiry. Returns the number removed.
    """
    result = await get_otps_collection().delete_many({"expires_at": {"$lt": utc_now()}})
    if result.deleted_count:
        logger.info(f"Purged {result.deleted_count} expired OTPs")
    return result.deleted_count
