"""
app/services/storage_service.py

Purpose: File storage

- GridFS: documents uploaded through /api/auth/upload-doc, served from /api/uploads
- Telegram storage channel: course files recorded as TelegramFile documents
"""

import re
import uuid
from typing import Any, AsyncIterator, Dict, Optional, Tuple

from gridfs.errors import NoFile

from app.core.config import settings
from app.core.exceptions import ResourceNotFoundError
from app.core.logging import get_logger
from app.db.mongo import get_gridfs_bucket
from app.services import query_service
from app.services.telegram_service import telegram_service

logger = get_logger(__name__)

CHUNK_SIZE = 256 * 1024
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(original: Optional[str]) -> str:
    """
    Returns a collision-free storage name that keeps the original extension.
    """
    cleaned = _UNSAFE_CHARS.sub("_", (original or "file").strip()) or "file"
    return f"{uuid.uuid4().hex}-{cleaned[-100:]}"


def upload_url(filename: str) -> str:
    return f"{settings.BASE_URL.rstrip('/')}{settings.API_PREFIX}/uploads/{filename}"


# ==============================================
# GRIDFS
# ==============================================

async def save_upload(original_name: Optional[str], content: bytes, content_type: Optional[str]) -> Dict[str, Any]:
    """
    Stores bytes in GridFS.

    Returns:
        {"filename", "url", "size"}
    """
    filename = safe_filename(original_name)
    bucket = get_gridfs_bucket()
    await bucket.upload_from_stream(
        filename,
        content,
        metadata={
            "content_type": content_type or "application/octet-stream",
            "original_name": original_name,
        },
    )
    logger.info(f"Stored upload {filename} ({len(content)} bytes)")
    return {"filename": filename, "url": upload_url(filename), "size": len(content)}


async def open_upload(filename: str) -> Tuple[AsyncIterator[bytes], str, int]:
    """
    Opens a stored upload for streaming.

    Returns:
        (chunk iterator, content type, length)

    Raises:
        ResourceNotFoundError: no file with that name
    """
    bucket = get_gridfs_bucket()
    try:
        grid_out = await bucket.open_download_stream_by_name(filename)
    except NoFile:
        raise ResourceNotFoundError("File not found")

    metadata = grid_out.metadata or {}
    content_type = metadata.get("content_type", "application/octet-stream")

    async def chunks() -> AsyncIterator[bytes]:
        while True:
            data = await grid_out.readchunk()
            if not data:
                break
            yield data

    return chunks(), content_type, grid_out.length


# ==============================================
# TELEGRAM STORAGE
# ==============================================

async def store_course_file(
    course: Dict[str, Any],
    uploader_id: str,
    original_name: str,
    content: bytes,
    mime_type: str,
    caption: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Sends a file to the storage channel, records it as a TelegramFile and
    appends it to the course's files. The caption defaults to the course title.
    """
    existing = await query_service.get_all_by_attr("TelegramFile", ["_id"], {"course": course["id"]})

    stored = await telegram_service.upload_document(
        original_name, content, mime_type, caption=caption or course.get("title")
    )

    record = await query_service.create(
        "TelegramFile",
        {
            "filename": safe_filename(original_name),
            "original_name": original_name,
            "mime_type": mime_type,
            "size": len(content),
            "telegram_file_id": stored["file_id"],
            "telegram_message_id": stored["message_id"],
            "uploaded_by": uploader_id,
            "course": course["id"],
            "order": len(existing),
        },
    )

    files = list(course.get("files") or []) + [record["id"]]
    await query_service.update("Course", {"id": course["id"]}, {"files": files})
    return record
