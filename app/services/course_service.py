"""
app/services/course_service.py

Purpose: Course creation outside the generic CRUD routes

- Web upload of a Telegram-stored course (course + Video/Audio/Pdf record)
- Access code lookup
"""

from typing import Any, Dict, Optional

from app.core.exceptions import ResourceNotFoundError
from app.core.logging import get_logger, LogContext
from app.services import query_service
from utils.code_utils import generate_access_code, generate_course_code
from utils.time_utils import utc_now

logger = get_logger(__name__)

# file_type -> (table, url field)
MEDIA_TABLES = {
    "video": ("Video", "video_url"),
    "audio": ("Audio", "audio_url"),
    "pdf": ("Pdf", "pdf_url"),
}


async def create_course_with_telegram(user: Dict[str, Any], payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Creates a course whose file already lives in Telegram storage, plus the
    media record matching `file_type`.

    Returns:
        {"course", "media", "course_code", "access_code"}
    """
    course_code = generate_course_code()
    access_code = generate_access_code(payload.get("title"))
    file_type = payload.get("file_type") or "video"
    telegram_file_id = payload.get("telegram_file_id")

    with LogContext(user_id=user["id"]):
        course = await query_service.create(
            "Course",
            {
                "user_id": user["id"],
                "instructor": user["id"],
                "first_name": user.get("first_name") or "Unknown",
                "last_name": user.get("last_name") or "Artist",
                "profile_image": user.get("profile_image"),
                "title": payload["title"],
                "description": payload["description"],
                "course_type": file_type,
                "category": payload["category"],
                "price": payload.get("price") or 0,
                "discount": "0%",
                "license_type": "Paid",
                "telegram_file_id": telegram_file_id,
                "course_code": course_code,
                "access_code": access_code,
                "release_date": utc_now(),
            },
        )

        media: Optional[Dict[str, Any]] = None
        if file_type in MEDIA_TABLES and telegram_file_id:
            table, url_field = MEDIA_TABLES[file_type]
            media_payload = {"course_id": course["id"], url_field: telegram_file_id}
            if table == "Pdf":
                media_payload["page_count"] = payload.get("page_count") or 0
            media = await query_service.create(table, media_payload)

        logger.info(f"Course {course_code} created with Telegram file ({file_type})")
        return {
            "course": course,
            "media": media,
            "course_code": course_code,
            "access_code": access_code,
        }


async def get_course_by_access_code(access_code: str) -> Dict[str, Any]:
    course = await query_service.get_one("Course", {"access_code": access_code})
    if not course:
        raise ResourceNotFoundError("Course not found with this access code")
    return course
