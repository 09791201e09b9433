"""
app/services/maintenance_service.py

Purpose: Periodic housekeeping

- Purge expired OTPs (backs up the TTL index, which runs about once a minute)
- Drop idle bot upload sessions
"""

import asyncio
from typing import Dict

from app.core.config import settings
from app.core.logging import get_logger
from app.services.otp_service import cleanup_expired_otps
from app.services.session_service import session_store

logger = get_logger(__name__)


async def run_maintenance_once() -> Dict[str, int]:
    """
    Runs every housekeeping job once.

    Returns:
        {"otps_removed", "sessions_removed"}
    """
    otps_removed = await cleanup_expired_otps()
    sessions_removed = session_store.cleanup(settings.SESSION_TIMEOUT_MINUTES)
    return {"otps_removed": otps_removed, "sessions_removed": sessions_removed}


async def maintenance_loop(interval_seconds: int = None) -> None:
    """
    Runs housekeeping forever. Cancelled on shutdown.
    """
    interval = interval_seconds or settings.OTP_CLEANUP_INTERVAL_SECONDS
    logger.info(f"🧹 Maintenance loop started (every {interval}s)")

    while True:
        await asyncio.sleep(interval)
        try:
            result = await run_maintenance_once()
            logger.debug(f"Maintenance run: {result}")
        except Exception as e:
            # Keep the loop alive; the next run retries
            logger.error(f"Maintenance run failed: {e}", exc_info=True)
