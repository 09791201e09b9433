"""
utils/telegram_utils.py

Purpose: Telegram message builders and update parsing

- Reply and inline keyboard payloads
- Extracts the message / sender / chat from an update
- Picks the file out of a media message
"""

from typing import Any, Dict, List, Optional


def build_reply_keyboard(
    rows: List[List[str]],
    one_time_keyboard: bool = False,
    selective: bool = False,
) -> Dict[str, Any]:
    """
    Creates a custom reply keyboard.

    Args:
        rows: Button captions, one list per keyboard row
    """
    return {
        "keyboard": [[{"text": text} for text in row] for row in rows],
        "resize_keyboard": True,
        "one_time_keyboard": one_time_keyboard,
        "selective": selective,
    }


def build_inline_keyboard(rows: List[List[Dict[str, str]]]) -> Dict[str, Any]:
    """
    Creates an inline keyboard.

    Args:
        rows: Button dicts with 'text' and either 'callback_data' or 'url'
    """
    return {
        "inline_keyboard": [
            [{k: v for k, v in button.items() if k in ("text", "callback_data", "url")} for button in row]
            for row in rows
        ]
    }


def remove_keyboard() -> Dict[str, Any]:
    return {"remove_keyboard": True}


def extract_message(update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Returns the message an update is about, from `message`,
    `callback_query.message` or `pre_checkout_query`.
    """
    if update.get("message"):
        return update["message"]
    callback = update.get("callback_query")
    if callback and callback.get("message"):
        return callback["message"]
    return None


def extract_sender(update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    The Telegram user who triggered the update. For button presses this is
    the presser, not the bot that authored the message.
    """
    for key in ("callback_query", "pre_checkout_query", "message"):
        if update.get(key) and update[key].get("from"):
            return update[key]["from"]
    return None


def extract_media(message: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Reads the file from a media message.

    Returns:
        {"telegram_file_id", "original_name", "mime_type", "size"} or None
    """
    if message.get("photo"):
        # Sizes are ordered smallest first
        photo = message["photo"][-1]
        return {
            "telegram_file_id": photo["file_id"],
            "original_name": f"photo_{photo['file_id']}.jpg",
            "mime_type": "image/jpeg",
            "size": None,
        }
    if message.get("document"):
        doc = message["document"]
        return {
            "telegram_file_id": doc["file_id"],
            "original_name": doc.get("file_name") or f"document_{doc['file_id']}",
            "mime_type": doc.get("mime_type") or "application/octet-stream",
            "size": doc.get("file_size"),
        }
    if message.get("video"):
        video = message["video"]
        return {
            "telegram_file_id": video["file_id"],
            "original_name": f"video_{video['file_id']}.mp4",
            "mime_type": "video/mp4",
            "size": video.get("file_size"),
        }
    if message.get("audio"):
        audio = message["audio"]
        return {
            "telegram_file_id": audio["file_id"],
            "original_name": f"audio_{audio['file_id']}.mp3",
            "mime_type": "audio/mpeg",
            "size": audio.get("file_size"),
        }
    return None


def has_media(message: Dict[str, Any]) -> bool:
    return any(message.get(kind) for kind in ("photo", "document", "video", "audio"))
