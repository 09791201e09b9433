"""
app/services/telegram_poller.py

Purpose: Telegram long-polling (alternative to the webhook)

- getUpdates loop feeding the same dispatcher as the webhook
- Offset advanced past every handled update
- Growing back-off on API errors, stops after repeated failures
"""

import asyncio
from typing import Optional

from app.core.config import settings
from app.core.exceptions import ExternalServiceError
from app.core.logging import get_logger
from app.flow.dispatcher import dispatch_update
from app.services.telegram_service import telegram_service

logger = get_logger(__name__)

POLL_INTERVAL_SECONDS = 2
RETRY_DELAY_SECONDS = 5
MAX_RETRIES = 5


class TelegramPoller:
    """Pulls updates with getUpdates and hands them to dispatch_update"""

    def __init__(self):
        self.offset: Optional[int] = None
        self.running = False

    async def poll_once(self) -> int:
        """
        Fetches one batch and dispatches it.

        Returns:
            Number of updates handled
        """
        updates = await telegram_service.get_updates(
            offset=self.offset, timeout=settings.TELEGRAM_POLL_TIMEOUT
        )
        for update in updates:
            try:
                await dispatch_update(update)
            except Exception as e:
                logger.error(f"Failed to handle update {update.get('update_id')}: {e}", exc_info=True)
            # Never redeliver, even when handling failed
            self.offset = update["update_id"] + 1
        return len(updates)

    async def run(self) -> None:
        logger.info("🤖 Starting Telegram bot long-polling...")
        self.running = True
        failures = 0

        while self.running:
            try:
                await self.poll_once()
                failures = 0
                await asyncio.sleep(POLL_INTERVAL_SECONDS)
            except ExternalServiceError as e:
                failures += 1
                if failures >= MAX_RETRIES:
                    logger.critical("Max retries reached. Stopping Telegram polling.")
                    break
                delay = RETRY_DELAY_SECONDS * failures
                logger.error(f"Telegram polling error: {e.message}. Retrying in {delay}s")
                await asyncio.sleep(delay)

        self.running = False
        logger.info("Telegram polling stopped.")

    def stop(self) -> None:
        self.running = False


# Singleton instance
telegram_poller = TelegramPoller()
