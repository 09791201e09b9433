"""
app/services/telegram_service.py

Purpose: Telegram Bot API client

- Bot replies (text, photo previews, keyboards, callback answers)
- File download by file_id
- Storage channel uploads (Telegram as free file storage)
- getUpdates for the long-poller
"""

import httpx
from typing import Dict, Any, Optional, List, Tuple
from app.core.config import settings
from app.core.exceptions import ExternalServiceError
from app.core.logging import get_logger

logger = get_logger(__name__)


class TelegramService:
    """Service for talking to the Telegram Bot API"""

    def __init__(self):
        self.token = settings.TELEGRAM_BOT_TOKEN
        self.storage_chat_id = settings.TELEGRAM_STORAGE_CHAT_ID
        self.api_base = settings.TELEGRAM_API_BASE.rstrip("/")

    @property
    def base_url(self) -> str:
        return f"{self.api_base}/bot{self.token}"

    def is_configured(self) -> bool:
        """Check if the bot token is set"""
        return bool(self.token)

    def file_url(self, file_path: str) -> str:
        return f"{self.api_base}/file/bot{self.token}/{file_path}"

    async def _call(
        self,
        method: str,
        payload: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Tuple[str, bytes, str]]] = None,
        timeout: float = 15.0,
    ) -> Any:
        """
        Calls a Bot API method and returns its `result`.

        Raises:
            ExternalServiceError: not configured, HTTP failure, or ok=false
        """
        if not self.is_configured():
            raise ExternalServiceError("Telegram bot token is not configured")

        url = f"{self.base_url}/{method}"
        try:
            async with httpx.AsyncClient() as client:
                if files:
                    response = await client.post(url, data=payload, files=files, timeout=timeout)
                else:
                    response = await client.post(url, json=payload or {}, timeout=timeout)
        except httpx.TimeoutException:
            logger.error(f"Telegram API timeout: {method}")
            raise ExternalServiceError(f"Telegram {method} timed out")
        except httpx.HTTPError as e:
            logger.error(f"Telegram API transport error on {method}: {e}")
            raise ExternalServiceError(f"Telegram {method} failed")

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code != 200 or not body.get("ok"):
            description = body.get("description") or response.text
            logger.error(f"❌ Telegram API error on {method}: {response.status_code} - {description}")
            raise ExternalServiceError(
                f"Telegram {method} failed", details={"description": description}
            )

        return body.get("result")

    # ==============================================
    # BOT REPLIES
    # ==============================================

    async def get_me(self) -> Dict[str, Any]:
        return await self._call("getMe")

    async def set_webhook(self, url: str) -> bool:
        return await self._call("setWebhook", {"url": url})

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: Optional[Dict[str, Any]] = None,
        parse_mode: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"chat_id": chat_id, "text": text}
        if reply_markup:
            payload["reply_markup"] = reply_markup
        if parse_mode:
            payload["parse_mode"] = parse_mode
        return await self._call("sendMessage", payload)

    async def send_photo(
        self,
        chat_id: int,
        photo: str,
        caption: Optional[str] = None,
        reply_markup: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        `photo` is a Telegram file_id or a public URL.
        """
        payload: Dict[str, Any] = {"chat_id": chat_id, "photo": photo}
        if caption:
            payload["caption"] = caption
        if reply_markup:
            payload["reply_markup"] = reply_markup
        return await self._call("sendPhoto", payload)

    async def answer_callback_query(self, callback_query_id: str, text: Optional[str] = None) -> bool:
        payload: Dict[str, Any] = {"callback_query_id": callback_query_id}
        if text:
            payload["text"] = text
        return await self._call("answerCallbackQuery", payload)

    async def answer_pre_checkout_query(
        self, pre_checkout_query_id: str, ok: bool = True, error_message: Optional[str] = None
    ) -> bool:
        payload: Dict[str, Any] = {"pre_checkout_query_id": pre_checkout_query_id, "ok": ok}
        if error_message:
            payload["error_message"] = error_message
        return await self._call("answerPreCheckoutQuery", payload)

    # ==============================================
    # FILES
    # ==============================================

    async def get_file(self, file_id: str) -> Dict[str, Any]:
        return await self._call("getFile", {"file_id": file_id})

    async def get_file_link(self, file_id: str) -> str:
        """
        Returns a temporary download URL for a stored file.
        """
        info = await self.get_file(file_id)
        return self.file_url(info["file_path"])

    async def download_file(self, file_id: str) -> Tuple[bytes, str]:
        """
        Downloads a file by id.

        Returns:
            (content, file_path)
        """
        info = await self.get_file(file_id)
        file_path = info["file_path"]

        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(self.file_url(file_path), timeout=60.0)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Telegram file download failed: {e}")
            raise ExternalServiceError("Failed to download file from Telegram")

        logger.info(f"📥 Downloaded {file_path} ({len(response.content)} bytes)")
        return response.content, file_path

    async def upload_document(
        self,
        filename: str,
        content: bytes,
        mime_type: str = "application/octet-stream",
        caption: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Sends a file to the storage chat.

        Returns:
            {"file_id", "message_id"}
        """
        if not self.storage_chat_id:
            raise ExternalServiceError("Telegram storage chat is not configured")

        payload = {"chat_id": self.storage_chat_id}
        if caption:
            payload["caption"] = caption

        message = await self._call(
            "sendDocument",
            payload,
            files={"document": (filename, content, mime_type)},
            timeout=120.0,
        )
        file_id = extract_file_id(message)
        if not file_id:
            raise ExternalServiceError("File ID is missing in the Telegram response")

        logger.info(f"📤 Stored {filename} in Telegram (message {message.get('message_id')})")
        return {"file_id": file_id, "message_id": message.get("message_id")}

    # ==============================================
    # POLLING
    # ==============================================

    async def get_updates(self, offset: Optional[int] = None, timeout: int = 30) -> List[Dict[str, Any]]:
        payload: Dict[str, Any] = {"timeout": timeout}
        if offset is not None:
            payload["offset"] = offset
        return await self._call("getUpdates", payload, timeout=timeout + 10) or []


def extract_file_id(message: Dict[str, Any]) -> Optional[str]:
    """
    Picks the file id out of a sent message (document, video, audio or
    the largest photo size).
    """
    for kind in ("document", "video", "audio"):
        if message.get(kind):
            return message[kind].get("file_id")
    photos = message.get("photo") or []
    if photos:
        return photos[-1].get("file_id")
    return None


# Singleton instance
telegram_service = TelegramService()
