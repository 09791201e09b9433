"""
app/core/errors.py

Maps every exception that escapes a route onto the response envelope.

    LivAbhiError subclasses   -> their own code / status
    Starlette HTTPException   -> HTTP_ERROR with the original status
    RequestValidationError    -> VALIDATION_ERROR 422, one {field, message} per problem
    anything else             -> SERVER_ERROR 500
"""

from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.exceptions import LivAbhiError
from app.core.logging import get_logger
from app.schemas.response import prepare_response

logger = get_logger(__name__)

GENERIC_SERVER_MESSAGE = "An internal error occurred. Please try again later."


def _envelope(status_code: int, code: str, message: str, error: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=prepare_response(code, message, None, error))


def validation_problems(errors: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Flattens pydantic errors; the "body"/"query"/"path" prefix is dropped from loc.
    """
    problems = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header", "form"):
            loc = loc[1:]
        problems.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return problems


async def handle_livabhi_error(request: Request, exc: LivAbhiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.debug(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return _envelope(exc.status_code, exc.code, exc.message, exc.error_payload)


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = str(exc.detail)
    return _envelope(exc.status_code, "HTTP_ERROR", detail, detail)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _envelope(422, "VALIDATION_ERROR", "Input validation failed", validation_problems(exc.errors()))


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    client = request.client.host if request.client else "unknown"
    logger.error(f"Unhandled {type(exc).__name__} on {request.method} {request.url.path} from {client}", exc_info=True)

    message = GENERIC_SERVER_MESSAGE if settings.is_production else str(exc)
    return _envelope(500, "SERVER_ERROR", message, message)


def add_exception_handlers(app: FastAPI):
    app.add_exception_handler(LivAbhiError, handle_livabhi_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)
