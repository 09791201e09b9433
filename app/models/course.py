"""
app/models/course.py

Purpose: Course catalogue documents

- Course (the sellable product, created on the web or by the Telegram bot)
- Media records attached to a course (Video, Audio, Pdf)
- Comments
- TelegramFile (a file kept in the Telegram storage channel)
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from app.models.base import DocumentSchema, ObjectIdField
from utils.time_utils import utc_now


class Course(DocumentSchema):
    user_id: ObjectIdField
    instructor: ObjectIdField
    first_name: str
    last_name: str
    profile_image: Optional[str] = None
    title: str
    description: str
    course_type: str
    # Free text: the bot offers categories that the web form does not.
    category: str
    level: Literal["beginner", "intermediate", "advanced"] = "beginner"
    tags: List[str] = Field(default_factory=list)
    price: float = Field(..., ge=0)
    currency: str = "INR"
    stock: int = Field(default=0, ge=0)
    discount: str = "0"
    license_type: str = "standard"
    thumbnail: Optional[str] = None
    files: List[ObjectIdField] = Field(default_factory=list)
    telegram_file_id: Optional[str] = None
    course_code: Optional[str] = None
    access_code: Optional[str] = None
    release_date: datetime = Field(default_factory=utc_now)
    expiration_date: Optional[datetime] = None
    is_published: bool = False
    is_draft: bool = True
    published_at: Optional[datetime] = None
    submitted_for_approval: bool = False
    admin_approved: bool = False
    approved_at: Optional[datetime] = None
    approved_by: Optional[ObjectIdField] = None
    rejection_reason: Optional[str] = None
    requirements: List[str] = Field(default_factory=list)
    what_you_will_learn: List[str] = Field(default_factory=list)


class Video(DocumentSchema):
    course_id: ObjectIdField
    video_url: str
    duration: Optional[float] = None


class Audio(DocumentSchema):
    course_id: ObjectIdField
    audio_url: str


class Pdf(DocumentSchema):
    course_id: ObjectIdField
    pdf_url: str
    page_count: int = 0


class Comment(DocumentSchema):
    course_id: ObjectIdField
    name: Optional[str] = None
    comment: str = Field(..., max_length=255)


class TelegramFileMetadata(BaseModel):
    duration: Optional[float] = None
    resolution: Optional[str] = None
    pages: Optional[int] = None
    encoding: Optional[str] = None
    bitrate: Optional[int] = None


class TelegramFile(DocumentSchema):
    filename: str
    original_name: str
    mime_type: str
    size: int = Field(..., ge=0)
    telegram_file_id: str
    telegram_message_id: int
    uploaded_by: ObjectIdField
    course: ObjectIdField
    order: int = 0
    is_public: bool = False
    download_count: int = 0
    last_accessed: Optional[datetime] = None
    metadata: TelegramFileMetadata = Field(default_factory=TelegramFileMetadata)
