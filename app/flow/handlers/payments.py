"""
app/flow/handlers/payments.py

Handles: Telegram purchase updates

- buy_<id> button: purchase flow placeholder
- pre_checkout_query: approved
- successful_payment: acknowledged
"""

from typing import Dict, Any

from app.schemas.telegram import BotContext
from app.services.telegram_service import telegram_service
from utils.constants import PAYMENT_RECEIVED_MESSAGE, PURCHASE_COMING_SOON_MESSAGE
from app.core.logging import get_logger

logger = get_logger(__name__)


async def handle_buy(ctx: BotContext, product_id: str) -> Dict[str, Any]:
    logger.info(f"Buy requested for product {product_id}")
    return {"message": PURCHASE_COMING_SOON_MESSAGE}


async def handle_pre_checkout(query: Dict[str, Any]) -> None:
    await telegram_service.answer_pre_checkout_query(query["id"], ok=True)
    logger.info(f"Pre-checkout approved: {query.get('invoice_payload')}")


async def handle_successful_payment(ctx: BotContext, payment: Dict[str, Any]) -> Dict[str, Any]:
    logger.info(
        f"Successful payment: {payment.get('total_amount')} {payment.get('currency')} "
        f"charge={payment.get('telegram_payment_charge_id')}"
    )
    return {"message": PAYMENT_RECEIVED_MESSAGE}
