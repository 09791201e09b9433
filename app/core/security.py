"""
app/core/security.py

Purpose: Credentials and access control

- Password hashing (werkzeug)
- JWT access tokens (PyJWT, HS256)
- FastAPI dependencies: current user, role guard
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from bson import ObjectId
from fastapi import Depends, Header
from werkzeug.security import check_password_hash, generate_password_hash

from app.core.config import settings
from app.core.exceptions import AuthenticationError, ForbiddenError
from app.core.logging import get_logger
from app.services.user_service import get_user_by_id

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not hashed:
        return False
    return check_password_hash(hashed, password)


def create_access_token(user: Dict[str, Any]) -> str:
    """
    Issues a signed token for a user document (raw or rendered).

    Claims: email_id, name, id, user_status, role, exp.
    """
    user_id = user.get("_id") or user.get("id")
    payload = {
        "email_id": user.get("email"),
        "name": f"{user.get('first_name', '')} {user.get('last_name', '')}".strip(),
        "id": str(user_id),
        "user_status": user.get("status"),
        "role": user.get("role"),
        "exp": datetime.now(timezone.utc) + timedelta(days=settings.JWT_EXPIRES_DAYS),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")


def _extract_token(authorization: Optional[str], access_token: Optional[str]) -> Optional[str]:
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip()
    return access_token


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    x_access_token: Optional[str] = Header(default=None),
) -> Dict[str, Any]:
    """
    Resolves the caller from `Authorization: Bearer <token>` or `x-access-token`.

    Returns the user document without its password.
    """
    token = _extract_token(authorization, x_access_token)
    if not token:
        raise AuthenticationError("Access token is required")

    claims = decode_access_token(token)
    user_id = claims.get("id")
    if not user_id or not ObjectId.is_valid(user_id):
        raise AuthenticationError("Invalid token")

    user = await get_user_by_id(user_id)
    if not user:
        raise AuthenticationError("User no longer exists")
    return user


def require_roles(*roles: str):
    """
    Usage:
        user = Depends(require_roles("Artist", "Admin"))
    """
    allowed = set(roles)

    async def guard(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if user.get("role") not in allowed:
            logger.info(f"Role {user.get('role')} denied; needs one of {sorted(allowed)}")
            raise ForbiddenError(f"This action requires one of the roles: {', '.join(sorted(allowed))}")
        return user

    return guard
