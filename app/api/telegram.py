"""
app/api/telegram.py

Purpose: Telegram bot endpoints

- Receives Bot API updates (webhook mode)
- Passes them to the flow dispatcher
- Bot identity check
"""

from fastapi import APIRouter

from app.core.logging import get_logger
from app.flow.dispatcher import dispatch_update
from app.schemas.response import prepare_response
from app.schemas.telegram import TelegramUpdate
from app.services.telegram_service import telegram_service
from utils.constants import STATUS_OK

logger = get_logger(__name__)
router = APIRouter()


@router.post("/webhook")
async def telegram_webhook(update: TelegramUpdate):
    """
    Webhook target registered with setWebhook.

    Replies to the user go out through the Bot API, so the HTTP response
    only reports how the update was handled.
    """
    logger.info(f"📱 Telegram update {update.update_id} received")
    result = await dispatch_update(update.model_dump(exclude_none=True))
    return {"status": result.get("status"), "next_state": result.get("next_state")}


@router.get("/botinfo")
async def bot_info():
    bot = await telegram_service.get_me()
    return prepare_response(STATUS_OK, "Bot info", bot)
