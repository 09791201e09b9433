"""
app/flow/dispatcher.py

Purpose: Central Telegram update dispatcher

- Receives raw updates from the webhook or the long-poller
- Identifies the registered artist behind the update
- Routes commands, text, media and button presses to flow handlers
- Sends handler responses via the Bot API
"""

from typing import Dict, Any, Optional

from app.core.exceptions import ExternalServiceError
from app.core.logging import get_logger, LogContext
from app.flow.handlers.commands import (
    handle_cancel,
    handle_my_products,
    handle_start,
    handle_upload_command,
)
from app.flow.handlers.payments import handle_buy, handle_pre_checkout, handle_successful_payment
from app.flow.handlers.publish import handle_cancel_callback, handle_confirm
from app.flow.handlers.upload import handle_media, handle_upload_input
from app.flow.states import is_terminal
from app.schemas.telegram import BotContext
from app.services.session_service import session_store
from app.services.telegram_service import telegram_service
from app.services.user_service import find_user_by_telegram, link_telegram
from utils.constants import (
    CALLBACK_BUY_PREFIX,
    CALLBACK_CANCEL_UPLOAD,
    CALLBACK_CONFIRM_UPLOAD,
    CMD_CANCEL,
    CMD_MY_PRODUCTS,
    CMD_START,
    CMD_UPLOAD,
    NOT_REGISTERED_MESSAGE,
    UNKNOWN_ACTION_MESSAGE,
    UNKNOWN_COMMAND_MESSAGE,
)
from utils.telegram_utils import extract_message, extract_sender, has_media

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "❌ Something went wrong. Please try again or use /upload to start over."

COMMANDS = {
    CMD_START: handle_start,
    CMD_UPLOAD: handle_upload_command,
    CMD_MY_PRODUCTS: handle_my_products,
    CMD_CANCEL: handle_cancel,
}


async def dispatch_update(update: Dict[str, Any]) -> Dict[str, Any]:
    """
    Main dispatcher for incoming Telegram updates

    Returns:
        {"status": ..., "next_state": ...} (used by the webhook response and logs)
    """
    if update.get("pre_checkout_query"):
        await handle_pre_checkout(update["pre_checkout_query"])
        return {"status": "success"}

    message = extract_message(update)
    sender = extract_sender(update)
    if not message or not sender:
        logger.debug(f"Ignoring update {update.get('update_id')} with no message")
        return {"status": "ignored"}

    chat_id = message["chat"]["id"]
    telegram_user_id = sender["id"]
    username = sender.get("username")

    with LogContext(telegram_user_id=telegram_user_id):
        logger.info(f"📨 Telegram update {update.get('update_id')} from chat {chat_id}")

        user = await find_user_by_telegram(username, telegram_user_id)
        if not user:
            await send_response(chat_id, {"message": NOT_REGISTERED_MESSAGE})
            return {"status": "unregistered"}

        await link_telegram(user, telegram_user_id, chat_id, username)
        ctx = BotContext(
            telegram_user_id=telegram_user_id, chat_id=chat_id, username=username, user=user
        )

        async with session_store.lock(telegram_user_id):
            try:
                response = await route_update(ctx, update, message)
            except Exception as e:
                logger.error(f"❌ Dispatcher error: {e}", exc_info=True)
                response = {"message": GENERIC_ERROR_MESSAGE}

        if response:
            await send_response(chat_id, response)

        return {"status": "success", "next_state": (response or {}).get("next_state")}


async def route_update(ctx: BotContext, update: Dict[str, Any], message: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Routes an update to its handler. Must be called with the user's session lock held.
    """
    callback = update.get("callback_query")
    if callback:
        return await route_callback(ctx, callback)

    if message.get("successful_payment"):
        return await handle_successful_payment(ctx, message["successful_payment"])

    session = session_store.get(ctx.telegram_user_id)
    if session and is_terminal(session.state):
        session_store.clear(ctx.telegram_user_id)
        session = None

    text = (message.get("text") or "").strip()
    if text:
        # "/upload@SomeBot" in group chats
        command = text.split()[0].split("@")[0].lower()
        handler = COMMANDS.get(command)
        if handler:
            logger.info(f"🚦 Command {command}")
            return await handler(ctx)

        if session:
            with LogContext(state=session.state.value):
                return await handle_upload_input(ctx, session, text)
        return {"message": UNKNOWN_COMMAND_MESSAGE}

    if has_media(message):
        return await handle_media(ctx, session, message)

    return None


async def route_callback(ctx: BotContext, callback: Dict[str, Any]) -> Dict[str, Any]:
    try:
        await telegram_service.answer_callback_query(callback["id"])
    except ExternalServiceError as e:
        logger.warning(f"Could not answer callback query: {e.message}")

    data = callback.get("data") or ""
    logger.info(f"🔘 Callback {data}")

    if data == CALLBACK_CONFIRM_UPLOAD:
        return await handle_confirm(ctx, session_store.get(ctx.telegram_user_id))
    if data == CALLBACK_CANCEL_UPLOAD:
        return await handle_cancel_callback(ctx)
    if data.startswith(CALLBACK_BUY_PREFIX):
        return await handle_buy(ctx, data[len(CALLBACK_BUY_PREFIX):])
    return {"message": UNKNOWN_ACTION_MESSAGE}


async def send_response(chat_id: int, response: Dict[str, Any]) -> None:
    """
    Sends a handler response: optional image preview, then the message.
    Delivery failures are logged, not raised.
    """
    message_text = response.get("message", "")
    if not message_text:
        logger.warning("⚠️ Empty response message")
        return

    try:
        if response.get("preview_photo"):
            await telegram_service.send_photo(
                chat_id, response["preview_photo"], caption=response.get("preview_caption")
            )
        await telegram_service.send_message(
            chat_id,
            message_text,
            reply_markup=response.get("reply_markup"),
            parse_mode=response.get("parse_mode"),
        )
    except ExternalServiceError as e:
        logger.error(f"Failed to reply to chat {chat_id}: {e.message}")
