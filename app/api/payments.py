"""
app/api/payments.py

Purpose: Razorpay checkout

- Order creation
- Signature verification and Payment record
- Payment listing with buyer and course populated
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from typing import Optional

from app.core.logging import get_logger
from app.schemas.payment import CreateOrderRequest, VerifyPaymentRequest
from app.schemas.response import prepare_response
from app.services import query_service
from app.services.razorpay_service import payment_status, razorpay_service
from utils.constants import STATUS_CREATED, STATUS_SUCCESS

logger = get_logger(__name__)
router = APIRouter()


def _rupees(paise: Optional[int]) -> str:
    """49900 -> "499", 49950 -> "499.5"."""
    return f"{(paise or 0) / 100:.2f}".rstrip("0").rstrip(".") or "0"


@router.post("/orders", status_code=201)
async def create_order(body: CreateOrderRequest):
    order = await razorpay_service.create_order(body.amount, body.currency)
    return JSONResponse(status_code=201, content=prepare_response(STATUS_CREATED, "Order created", order))


@router.post("/verify")
async def verify_payment(body: VerifyPaymentRequest):
    if not razorpay_service.verify_signature(body.order_id, body.payment_id, body.signature):
        logger.warning(f"Signature mismatch for order {body.order_id}")
        return JSONResponse(
            status_code=400,
            content=prepare_response("INVALID_SIGNATURE", "Signature mismatch", None, None),
        )

    details = await razorpay_service.fetch_payment(body.payment_id)
    payment = await query_service.create(
        "Payment",
        {
            "transaction_id": body.payment_id,
            "order_id": body.order_id,
            "status": payment_status(details.get("status")),
            "amount": _rupees(details.get("amount")),
            "course_id": body.course_id,
            "user_id": body.user_id,
        },
    )

    logger.info(f"Payment {body.payment_id} recorded as {payment['status']}")
    return prepare_response(
        STATUS_SUCCESS, "Payment verified and saved", {"payment_details": details, "payment": payment}
    )


@router.get("/payments")
async def list_payments(user_id: Optional[str] = None, course_id: Optional[str] = None):
    cond = {}
    if user_id:
        cond["user_id"] = user_id
    if course_id:
        cond["course_id"] = course_id

    payments = await query_service.get_all_with_relation("Payment", cond, ["user_id", "course_id"])
    return prepare_response(STATUS_SUCCESS, "Payments fetched", payments)
