"""
app/schemas/payment.py

Purpose: Razorpay checkout request bodies
"""

from pydantic import BaseModel, Field


class CreateOrderRequest(BaseModel):
    amount: float = Field(..., gt=0, description="Amount in rupees")
    currency: str = Field(default="INR", min_length=3, max_length=3)


class VerifyPaymentRequest(BaseModel):
    """
    Fields posted back by Razorpay checkout, plus what was bought and by whom.
    """
    order_id: str
    payment_id: str
    signature: str
    course_id: str
    user_id: str

    class Config:
        json_schema_extra = {
            "example": {
                "order_id": "order_Nx1",
                "payment_id": "pay_Nx1",
                "signature": "5f0c...",
                "course_id": "65f1c0ffee0000000000c0de",
                "user_id": "65f1c0ffee0000000000beef",
            }
        }
