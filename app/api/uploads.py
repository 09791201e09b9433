"""
app/api/uploads.py

Purpose: Serves documents stored by /api/auth/upload-doc
"""

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from app.services.storage_service import open_upload

router = APIRouter()


@router.get("/uploads/{filename}")
async def serve_upload(filename: str):
    chunks, content_type, length = await open_upload(filename)
    return StreamingResponse(
        chunks,
        media_type=content_type,
        headers={
            "Content-Length": str(length),
            "Cache-Control": "public, max-age=3600",
        },
    )
