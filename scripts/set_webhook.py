"""
Registers the bot webhook with Telegram

Points the Bot API at {BASE_URL}/api/telegram/webhook (or the URL given):
    python scripts/set_webhook.py [url]
"""

import asyncio
import sys
from pathlib import Path
import logging
from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

from app.core.config import settings
from app.core.exceptions import ExternalServiceError
from app.services.telegram_service import telegram_service

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


async def main(url: str) -> int:
    if not settings.telegram_enabled:
        logger.error("❌ TELEGRAM_BOT_TOKEN is not set")
        return 1

    try:
        bot = await telegram_service.get_me()
        await telegram_service.set_webhook(url)
    except ExternalServiceError as e:
        logger.error(f"❌ Could not register webhook: {e.message}")
        return 1

    logger.info(f"✅ @{bot.get('username')} now delivers updates to {url}")
    if settings.TELEGRAM_POLLING:
        logger.warning("⚠️ TELEGRAM_POLLING is on; getUpdates stops working while a webhook is set")
    return 0


if __name__ == "__main__":
    default_url = f"{settings.BASE_URL.rstrip('/')}{settings.API_PREFIX}/telegram/webhook"
    target = sys.argv[1] if len(sys.argv) > 1 else default_url
    sys.exit(asyncio.run(main(target)))
