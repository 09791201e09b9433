"""
app/flow/handlers/publish.py

Handles: STEP 8 – confirmation callbacks

- Confirm: download the Telegram file, store it through the upload API,
  create the Course, reply with the live link
- Cancel: drop the session

A failed publish keeps the session so Confirm can be pressed again.
"""

from typing import Dict, Any, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import ExternalServiceError, LivAbhiError
from app.flow.states import UploadState
from app.schemas.telegram import BotContext
from app.services import query_service
from app.services.session_service import UploadSession, session_store
from app.services.telegram_service import telegram_service
from utils.constants import (
    PUBLISH_FAILED_MESSAGE,
    PUBLISHED_MESSAGE,
    SESSION_EXPIRED_MESSAGE,
    UPLOAD_CANCELLED_MESSAGE,
)
from utils.time_utils import utc_now
from app.core.logging import get_logger

logger = get_logger(__name__)


async def upload_via_api(filename: str, content: bytes, mime_type: str) -> str:
    """
    Re-uploads a file through POST /api/auth/upload-doc.

    Returns:
        Public URL of the stored file
    """
    url = f"{settings.BASE_URL.rstrip('/')}{settings.API_PREFIX}/auth/upload-doc"
    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                url, files={"files": (filename, content, mime_type)}, timeout=120.0
            )
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Internal upload failed: {e}")
        raise ExternalServiceError("Failed to upload file")

    uploaded_url: Optional[str] = (response.json().get("data") or {}).get("doc0")
    if not uploaded_url:
        raise ExternalServiceError("Upload API returned no file URL")
    return uploaded_url


def build_course_payload(ctx: BotContext, session: UploadSession, file_url: str) -> Dict[str, Any]:
    user = ctx.user
    return {
        "user_id": ctx.artist_id,
        "instructor": ctx.artist_id,
        "first_name": user.get("first_name"),
        "last_name": user.get("last_name"),
        "profile_image": user.get("profile_image"),
        "title": session.title,
        "description": session.description,
        "course_type": session.product_type,
        "category": session.category,
        "tags": session.tags,
        "price": session.price,
        "currency": session.currency,
        "stock": session.stock,
        "discount": "0",
        "license_type": "Paid",
        "thumbnail": file_url,
        "telegram_file_id": session.media.telegram_file_id,
        "release_date": utc_now(),
    }


async def handle_confirm(ctx: BotContext, session: Optional[UploadSession]) -> Dict[str, Any]:
    if session is None or session.state != UploadState.AWAITING_CONFIRMATION:
        return {"message": SESSION_EXPIRED_MESSAGE}

    try:
        content, _ = await telegram_service.download_file(session.media.telegram_file_id)
        file_url = await upload_via_api(
            session.media.original_name, content, session.media.mime_type
        )
        course = await query_service.create("Course", build_course_payload(ctx, session, file_url))
    except LivAbhiError as e:
        logger.error(f"Publish failed, session kept for retry: {e.message}")
        return {"message": PUBLISH_FAILED_MESSAGE}

    # The course is live even if the session was evicted meanwhile
    if session_store.get(ctx.telegram_user_id) is session:
        session_store.advance(ctx.telegram_user_id, UploadState.PUBLISHED)
        session_store.clear(ctx.telegram_user_id)
    logger.info(f"Course {course['id']} published from Telegram")

    link = f"{settings.SITE_URL.rstrip('/')}/product/{course['id']}"
    return {
        "message": PUBLISHED_MESSAGE.format(link=link),
        "next_state": UploadState.PUBLISHED.value,
        "course_id": course["id"],
    }


async def handle_cancel_callback(ctx: BotContext) -> Dict[str, Any]:
    session_store.clear(ctx.telegram_user_id)
    return {"message": UPLOAD_CANCELLED_MESSAGE, "next_state": UploadState.CANCELLED.value}
