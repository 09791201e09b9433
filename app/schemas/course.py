"""
app/schemas/course.py

Purpose: Course creation from a file already stored in Telegram
"""

from pydantic import BaseModel, Field
from typing import Literal, Optional


class TelegramCourseRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    price: float = Field(default=0, ge=0)
    file_type: Literal["video", "audio", "pdf"] = "video"
    telegram_file_id: Optional[str] = None
    page_count: Optional[int] = Field(default=None, ge=0)
