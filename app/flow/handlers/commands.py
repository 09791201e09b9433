"""
app/flow/handlers/commands.py

Handles: slash commands

- /start: greeting
- /upload: fresh session, ask for media type
- /myproducts: list the artist's courses
- /cancel: drop the session
"""

from typing import Dict, Any

from app.flow.states import UploadState, get_progress_message
from app.schemas.telegram import BotContext
from app.services import query_service
from app.services.session_service import session_store
from utils.constants import (
    ASK_MEDIA_TYPE_MESSAGE,
    MEDIA_TYPE_BUTTONS,
    NO_PRODUCTS_MESSAGE,
    NOTHING_TO_CANCEL_MESSAGE,
    PRODUCTS_FAILED_MESSAGE,
    PRODUCTS_HEADER,
    START_MESSAGE,
    UPLOAD_CANCELLED_MESSAGE,
)
from utils.telegram_utils import build_reply_keyboard, remove_keyboard
from app.core.logging import get_logger

logger = get_logger(__name__)


async def handle_start(ctx: BotContext) -> Dict[str, Any]:
    return {"message": START_MESSAGE.format(first_name=ctx.first_name)}


async def handle_upload_command(ctx: BotContext) -> Dict[str, Any]:
    """
    Starts (or restarts) the upload flow.
    """
    session_store.start(ctx.telegram_user_id, ctx.artist_id)
    logger.info("Upload flow started")

    return {
        "message": f"{get_progress_message(UploadState.AWAITING_MEDIA_TYPE)}\n{ASK_MEDIA_TYPE_MESSAGE}",
        "reply_markup": build_reply_keyboard([MEDIA_TYPE_BUTTONS], one_time_keyboard=True),
        "next_state": UploadState.AWAITING_MEDIA_TYPE.value,
    }


async def handle_my_products(ctx: BotContext) -> Dict[str, Any]:
    try:
        courses = await query_service.get_all("Course", {"user_id": ctx.artist_id})
    except Exception as e:
        logger.error(f"Failed to list products: {e}", exc_info=True)
        return {"message": PRODUCTS_FAILED_MESSAGE}

    if not courses:
        return {"message": NO_PRODUCTS_MESSAGE}

    lines = [f"{i}. {c['title']} - ₹{c['price']:g}" for i, c in enumerate(courses, 1)]
    return {"message": "\n".join([PRODUCTS_HEADER] + lines)}


async def handle_cancel(ctx: BotContext) -> Dict[str, Any]:
    if not session_store.clear(ctx.telegram_user_id):
        return {"message": NOTHING_TO_CANCEL_MESSAGE, "reply_markup": remove_keyboard()}

    logger.info("Upload flow cancelled")
    return {
        "message": UPLOAD_CANCELLED_MESSAGE,
        "reply_markup": remove_keyboard(),
        "next_state": UploadState.CANCELLED.value,
    }
