"""
app/models/commerce.py

Purpose: Purchase-side documents (Payment, Cart, Order, Transaction)
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, validator

from app.models.base import DocumentSchema, ObjectIdField

Channel = Literal["web", "telegram"]


class Payment(DocumentSchema):
    transaction_id: str
    order_id: Optional[str] = None
    status: Literal["success", "failed", "pending"] = "pending"
    amount: str
    course_id: ObjectIdField
    user_id: ObjectIdField

    @validator("amount", pre=True)
    def amount_as_text(cls, v):
        return str(v) if isinstance(v, (int, float)) else v


class Cart(DocumentSchema):
    user_id: ObjectIdField
    course_id: ObjectIdField
    quantity: int = Field(default=1, ge=1)


class OrderTelegram(BaseModel):
    user_id: Optional[int] = None
    chat_id: Optional[int] = None
    invoice_message_id: Optional[int] = None
    payment_id: Optional[str] = None


class Order(DocumentSchema):
    order_number: str
    user_id: ObjectIdField
    product_id: ObjectIdField
    quantity: int = 1
    amount: float
    currency: str = "INR"
    status: Literal["CREATED", "PENDING_PAYMENT", "PAID", "FAILED", "CANCELLED"] = "CREATED"
    source: Channel = "web"
    telegram: OrderTelegram = Field(default_factory=OrderTelegram)


class TransactionTelegram(BaseModel):
    payment_id: Optional[str] = None
    provider_charge_id: Optional[str] = None
    raw_payload: Optional[Any] = None


class Transaction(DocumentSchema):
    order_id: ObjectIdField
    user_id: ObjectIdField
    amount: float
    currency: str = "INR"
    channel: Channel = "web"
    provider: str
    status: Literal["PENDING", "SUCCESS", "FAILED"] = "PENDING"
    telegram: TransactionTelegram = Field(default_factory=TransactionTelegram)
