"""
app/models/otp.py

Purpose: One-time password document

Lifecycle: stored -> verified at most once -> deleted.
Expired documents are removed by the TTL index and the maintenance purge.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, validator

from utils.time_utils import utc_now


class OTPRecord(BaseModel):
    email: str
    otp: str
    data: Optional[Any] = None
    expires_at: datetime
    verified: bool = False
    created_at: datetime = Field(default_factory=utc_now)

    @validator("email")
    def normalize_email(cls, v):
        return v.strip().lower()
