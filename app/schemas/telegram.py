"""
app/schemas/telegram.py

Purpose: Telegram webhook payloads and bot handler context

- TelegramUpdate: the raw update body (unknown keys kept)
- BotContext: who sent the update and where to reply
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional


class TelegramUpdate(BaseModel):
    """
    Incoming Bot API update. Only update_id is required; message,
    callback_query, pre_checkout_query and anything else pass through.
    """
    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "update_id": 10001,
                "message": {
                    "message_id": 1,
                    "from": {"id": 4242, "username": "artist_one"},
                    "chat": {"id": 4242, "type": "private"},
                    "text": "/upload",
                },
            }
        },
    )

    update_id: int
    message: Optional[Dict[str, Any]] = None
    callback_query: Optional[Dict[str, Any]] = None
    pre_checkout_query: Optional[Dict[str, Any]] = None


class BotContext(BaseModel):
    """
    Resolved sender of an update, handed to every flow handler.
    """
    telegram_user_id: int
    chat_id: int
    username: Optional[str] = None
    user: Dict[str, Any] = Field(..., description="Raw registered user document")

    @property
    def artist_id(self) -> str:
        return str(self.user["_id"])

    @property
    def first_name(self) -> str:
        return self.user.get("first_name") or "there"
