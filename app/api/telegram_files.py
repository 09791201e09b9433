"""
app/api/telegram_files.py

Purpose: Course files kept in the Telegram storage channel

- Upload (Artist / Business / Admin, own courses only)
- Temporary download link (course instructor or Admin)
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse
from typing import Any, Dict, Optional

from app.core.exceptions import ForbiddenError, ResourceNotFoundError, ValidationError
from app.core.logging import get_logger, LogContext
from app.core.security import get_current_user, require_roles
from app.schemas.response import prepare_response
from app.services import query_service, storage_service
from app.services.telegram_service import telegram_service
from utils.constants import MSG_UPLOADED, STATUS_CREATED, STATUS_OK
from utils.time_utils import utc_now

logger = get_logger(__name__)
router = APIRouter()

ALLOWED_MIME_TYPES = {
    "video/mp4", "video/avi", "video/mov", "video/quicktime", "video/x-ms-wmv",
    "application/pdf", "application/zip", "application/x-zip-compressed",
    "image/jpeg", "image/png", "image/gif",
    "audio/mp3", "audio/mpeg", "audio/wav", "audio/m4a", "audio/mp4",
}


def _can_manage(user: Dict[str, Any], course: Dict[str, Any]) -> bool:
    return user.get("role") == "Admin" or str(course.get("instructor")) == user["id"]


async def _load_course(course_id: str) -> Dict[str, Any]:
    course = await query_service.get_one("Course", {"id": course_id})
    if not course:
        raise ResourceNotFoundError("Course not found")
    return course


@router.post("/upload", status_code=201)
async def upload_course_file(
    file: UploadFile = File(...),
    course_id: str = Form(...),
    description: Optional[str] = Form(None),
    user: Dict[str, Any] = Depends(require_roles("Artist", "Business", "Admin")),
):
    course = await _load_course(course_id)
    if not _can_manage(user, course):
        raise ForbiddenError("You can only upload files to your own courses")

    mime_type = file.content_type or "application/octet-stream"
    if mime_type not in ALLOWED_MIME_TYPES:
        raise ValidationError(f"Invalid file type: {mime_type}")

    content = await file.read()
    if not content:
        raise ValidationError("No file uploaded")

    with LogContext(user_id=user["id"]):
        record = await storage_service.store_course_file(
            course, user["id"], file.filename or "file", content, mime_type, caption=description
        )
        logger.info(f"Stored {record['original_name']} for course {course_id}")

    data = {
        "file_id": record["id"],
        "filename": record["original_name"],
        "size": record["size"],
        "mime_type": record["mime_type"],
        "uploaded_at": record["created_at"],
        "telegram_file_id": record["telegram_file_id"],
    }
    return JSONResponse(status_code=201, content=prepare_response(STATUS_CREATED, MSG_UPLOADED, data))


@router.get("/{file_id}/link")
async def get_file_link(file_id: str, user: Dict[str, Any] = Depends(get_current_user)):
    record = await query_service.get_one("TelegramFile", {"id": file_id})
    if not record:
        raise ResourceNotFoundError("File not found")

    course = await _load_course(record["course"])
    if not _can_manage(user, course):
        raise ForbiddenError()

    url = await telegram_service.get_file_link(record["telegram_file_id"])
    await query_service.update(
        "TelegramFile",
        {"id": file_id},
        {"download_count": record.get("download_count", 0) + 1, "last_accessed": utc_now()},
    )

    return prepare_response(
        STATUS_OK,
        "File link generated",
        {"url": url, "filename": record["original_name"], "mime_type": record["mime_type"]},
    )
