"""
app/api/courses.py

Purpose: Course endpoints outside the generic table routes
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from typing import Any, Dict

from app.core.security import require_roles
from app.schemas.course import TelegramCourseRequest
from app.schemas.response import prepare_response
from app.services.course_service import create_course_with_telegram, get_course_by_access_code
from utils.constants import STATUS_CREATED, STATUS_OK

router = APIRouter()


@router.post("/telegram", status_code=201)
async def create_telegram_course(
    body: TelegramCourseRequest,
    user: Dict[str, Any] = Depends(require_roles("Artist", "Business", "Admin")),
):
    """
    Creates a course for a file already uploaded to Telegram storage.
    """
    result = await create_course_with_telegram(user, body.model_dump())
    return JSONResponse(
        status_code=201,
        content=prepare_response(STATUS_CREATED, "Course created successfully", result),
    )


@router.get("/access/{access_code}")
async def course_by_access_code(access_code: str):
    course = await get_course_by_access_code(access_code)
    return prepare_response(STATUS_OK, "Course found", course)
