"""
app/api/resume.py

Purpose: Résumé upload and parsing for job applications
"""

from fastapi import APIRouter, Depends, File, UploadFile
from typing import Any, Dict

from app.core.exceptions import ValidationError
from app.core.logging import get_logger, LogContext
from app.core.security import get_current_user
from app.schemas.response import prepare_response
from app.services.resume_service import parse_resume
from utils.constants import STATUS_OK

logger = get_logger(__name__)
router = APIRouter()

MAX_RESUME_BYTES = 5 * 1024 * 1024


@router.post("/parse")
async def parse_resume_upload(
    resume: UploadFile = File(...),
    user: Dict[str, Any] = Depends(get_current_user),
):
    content = await resume.read()
    if not content:
        raise ValidationError("No file uploaded")
    if len(content) > MAX_RESUME_BYTES:
        raise ValidationError("File too large (max 5MB)")

    with LogContext(user_id=user["id"]):
        logger.info(f"Resume parsing request: {resume.filename} ({len(content)} bytes)")
        parsed = parse_resume(resume.filename, resume.content_type, content)

    return prepare_response(STATUS_OK, "Resume parsed successfully", parsed)
