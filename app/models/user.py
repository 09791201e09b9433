"""
app/models/user.py

Purpose: User document model

- Identity and credentials (hashed password)
- Role and verification status
- Telegram linkage used by the artist upload bot
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, validator

from app.models.base import DocumentSchema

UserRole = Literal["User", "Artist", "Business", "Admin"]


class TelegramLink(BaseModel):
    user_id: Optional[int] = None
    chat_id: Optional[int] = None
    username: Optional[str] = None
    linked_at: Optional[datetime] = None


class User(DocumentSchema):
    first_name: str = Field(..., max_length=50)
    last_name: str = Field(..., max_length=50)
    email: str = Field(..., max_length=100)
    password: str = Field(..., max_length=200)
    role: UserRole = "User"
    status: Literal["Created", "Verified"] = "Created"
    profile_image: Optional[str] = Field(default=None, max_length=300)
    is_verified: bool = False
    telegram: TelegramLink = Field(default_factory=TelegramLink)

    @validator("email")
    def normalize_email(cls, v):
        return v.strip().lower()
