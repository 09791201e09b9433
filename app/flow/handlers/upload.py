"""
app/flow/handlers/upload.py

Handles: STEPS 1-8 of the upload flow

- Media type choice and the media itself
- Title, description (length limit), price, category, stock
- Summary with preview and Confirm / Cancel buttons

Invalid input re-prompts and leaves the state unchanged.
"""

from typing import Dict, Any

from app.flow.states import UploadState, expects_media, get_progress_message
from app.schemas.telegram import BotContext
from app.services.session_service import MediaInfo, UploadSession, session_store
from utils.constants import (
    ASK_CATEGORY_MESSAGE,
    ASK_DESCRIPTION_MESSAGE,
    ASK_PRICE_MESSAGE,
    ASK_STOCK_MESSAGE,
    ASK_TITLE_MESSAGE,
    CALLBACK_CANCEL_UPLOAD,
    CALLBACK_CONFIRM_UPLOAD,
    CANCEL_BUTTON_TEXT,
    CATEGORY_BUTTONS,
    CONFIRM_BUTTON_TEXT,
    DESCRIPTION_TOO_LONG_MESSAGE,
    INVALID_MEDIA_TYPE_MESSAGE,
    INVALID_PRICE_MESSAGE,
    INVALID_STOCK_MESSAGE,
    NOT_EXPECTED_MESSAGE,
    PREVIEW_CAPTION,
    SEND_MEDIA_MESSAGES,
    SUMMARY_MESSAGE,
    UNSUPPORTED_MEDIA_MESSAGE,
    UPLOAD_FIRST_MESSAGE,
)
from utils.telegram_utils import (
    build_inline_keyboard,
    build_reply_keyboard,
    extract_media,
    remove_keyboard,
)
from utils.validation_utils import parse_media_type, parse_non_negative_int, sanitize_input
from app.core.logging import get_logger

logger = get_logger(__name__)

DESCRIPTION_LIMIT = 300
TITLE_LIMIT = 200


def _prompt(state: UploadState, text: str, **extra) -> Dict[str, Any]:
    response = {"message": f"{get_progress_message(state)}\n{text}", "next_state": state.value}
    response.update(extra)
    return response


def _retry(text: str) -> Dict[str, Any]:
    return {"message": text}


async def handle_upload_input(ctx: BotContext, session: UploadSession, text: str) -> Dict[str, Any]:
    """
    Routes free text to the step the session is waiting on.
    """
    uid = ctx.telegram_user_id
    state = session.state

    if state == UploadState.AWAITING_MEDIA_TYPE:
        product_type = parse_media_type(text)
        if not product_type:
            return _retry(INVALID_MEDIA_TYPE_MESSAGE)
        session_store.advance(uid, UploadState.AWAITING_MEDIA, product_type=product_type)
        return _prompt(
            UploadState.AWAITING_MEDIA,
            SEND_MEDIA_MESSAGES[product_type],
            reply_markup=remove_keyboard(),
        )

    if state == UploadState.AWAITING_TITLE:
        title = sanitize_input(text, max_length=TITLE_LIMIT)
        if not title:
            return _retry(ASK_TITLE_MESSAGE)
        session_store.advance(uid, UploadState.AWAITING_DESCRIPTION, title=title)
        return _prompt(
            UploadState.AWAITING_DESCRIPTION,
            ASK_DESCRIPTION_MESSAGE.format(limit=DESCRIPTION_LIMIT),
        )

    if state == UploadState.AWAITING_DESCRIPTION:
        description = text.strip()
        if len(description) > DESCRIPTION_LIMIT:
            return _retry(DESCRIPTION_TOO_LONG_MESSAGE.format(limit=DESCRIPTION_LIMIT))
        session_store.advance(uid, UploadState.AWAITING_PRICE, description=description)
        return _prompt(UploadState.AWAITING_PRICE, ASK_PRICE_MESSAGE)

    if state == UploadState.AWAITING_PRICE:
        price = parse_non_negative_int(text)
        if price is None:
            return _retry(INVALID_PRICE_MESSAGE)
        session_store.advance(uid, UploadState.AWAITING_CATEGORY, price=price, currency="INR")
        return _prompt(
            UploadState.AWAITING_CATEGORY,
            ASK_CATEGORY_MESSAGE,
            reply_markup=build_reply_keyboard([CATEGORY_BUTTONS], one_time_keyboard=True),
        )

    if state == UploadState.AWAITING_CATEGORY:
        category = sanitize_input(text, max_length=100)
        if not category:
            return _retry(ASK_CATEGORY_MESSAGE)
        session_store.advance(uid, UploadState.AWAITING_STOCK, category=category)
        return _prompt(UploadState.AWAITING_STOCK, ASK_STOCK_MESSAGE, reply_markup=remove_keyboard())

    if state == UploadState.AWAITING_STOCK:
        stock = parse_non_negative_int(text)
        if stock is None:
            return _retry(INVALID_STOCK_MESSAGE)
        session = session_store.advance(uid, UploadState.AWAITING_CONFIRMATION, stock=stock)
        return build_summary(session)

    if state == UploadState.AWAITING_MEDIA:
        return _retry(SEND_MEDIA_MESSAGES.get(session.product_type, UNSUPPORTED_MEDIA_MESSAGE))

    return _retry(NOT_EXPECTED_MESSAGE)


async def handle_media(ctx: BotContext, session: UploadSession, message: Dict[str, Any]) -> Dict[str, Any]:
    """
    Accepts a photo / document / video / audio while AWAITING_MEDIA.
    """
    if session is None or not expects_media(session.state):
        return _retry(UPLOAD_FIRST_MESSAGE)

    media = extract_media(message)
    if not media:
        return _retry(UNSUPPORTED_MEDIA_MESSAGE)

    session_store.advance(ctx.telegram_user_id, UploadState.AWAITING_TITLE, media=MediaInfo(**media))
    logger.info(f"Media received: {media['mime_type']}")
    return _prompt(UploadState.AWAITING_TITLE, ASK_TITLE_MESSAGE)


def build_summary(session: UploadSession) -> Dict[str, Any]:
    """
    Summary message with Confirm / Cancel buttons, plus an image preview
    when the media is an image.
    """
    stock = "Unlimited (digital)" if session.stock == 0 else f"{session.stock} copies"
    summary = SUMMARY_MESSAGE.format(
        title=session.title,
        description=session.description,
        price=session.price,
        category=session.category,
        stock=stock,
    )
    response = _prompt(
        UploadState.AWAITING_CONFIRMATION,
        summary,
        parse_mode="Markdown",
        reply_markup=build_inline_keyboard([
            [{"text": CONFIRM_BUTTON_TEXT, "callback_data": CALLBACK_CONFIRM_UPLOAD}],
            [{"text": CANCEL_BUTTON_TEXT, "callback_data": CALLBACK_CANCEL_UPLOAD}],
        ]),
    )
    if session.media and session.media.mime_type.startswith("image/"):
        response["preview_photo"] = session.media.telegram_file_id
        response["preview_caption"] = PREVIEW_CAPTION
    return response
