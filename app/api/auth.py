"""
app/api/auth.py

Purpose: Account endpoints

- Email OTP signup (register -> verify-user)
- Login / admin login with JWT access tokens
- Profile read, update, delete
- Forgot / reset password via OTP
- Document upload to GridFS
"""

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse
from typing import Any, Dict, List

from app.core.exceptions import (
    ConflictError,
    ExternalServiceError,
    ForbiddenError,
    ResourceNotFoundError,
    ValidationError,
)
from app.core.logging import get_logger, LogContext
from app.core.security import create_access_token, get_current_user, hash_password, verify_password
from app.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    ResetPasswordRequest,
    VerifyUserRequest,
)
from app.schemas.response import prepare_response
from app.services import query_service, storage_service, user_service
from app.services.mail_service import mail_service
from app.services.otp_service import delete_otps, generate_otp, store_otp, verify_otp
from utils.constants import (
    ACCOUNT_CREATED,
    ACCOUNT_NOT_FOUND,
    ADMIN_ONLY,
    CURRENT_PASSWORD_INCORRECT,
    CURRENT_PASSWORD_REQUIRED,
    EMAIL_EXISTS,
    INVALID_OTP,
    LOGIN_SUCCESS,
    MSG_DELETED,
    MSG_UPLOADED,
    OTP_SENT,
    PASSWORD_RESET,
    PROFILE_UPDATED,
    RESET_OTP_SENT,
    STATUS_CREATED,
    STATUS_OK,
    USER_PROFILE,
    WRONG_PASSWORD,
)

logger = get_logger(__name__)
router = APIRouter()

RESET_PURPOSE = "password-reset"
MAX_UPLOAD_FILES = 5
MAX_UPLOAD_BYTES = 10 * 1024 * 1024


async def _send_otp(email: str, code: str, purpose: str) -> None:
    # Mail failures are logged; the stored OTP stays valid.
    try:
        await mail_service.send_otp_email(email, code, purpose)
    except ExternalServiceError as e:
        logger.error(f"OTP email to {email} not sent: {e.message}")


async def _authenticate(credentials: LoginRequest) -> Dict[str, Any]:
    user = await user_service.find_user_by_email(credentials.email)
    if not user:
        raise ResourceNotFoundError(ACCOUNT_NOT_FOUND)
    if not verify_password(credentials.password, user.get("password")):
        logger.info(f"Wrong password for {credentials.email}")
        raise ForbiddenError(WRONG_PASSWORD)
    return user


def _login_payload(user: Dict[str, Any]) -> Dict[str, Any]:
    data = user_service.public_user(user)
    data["access_token"] = create_access_token(user)
    return data


# ==============================================
# SIGNUP
# ==============================================

@router.post("/register")
async def register(body: RegisterRequest):
    """
    Step 1 of signup: store the pending account with an OTP and email the code.
    """
    with LogContext(email=body.email):
        if await user_service.find_user_by_email(body.email):
            raise ConflictError(EMAIL_EXISTS)

        pending = body.model_dump()
        pending["password"] = hash_password(body.password)

        code = generate_otp()
        await store_otp(body.email, code, data=pending)
        await _send_otp(body.email, code, "Signup verification")

        logger.info("Signup OTP issued")
    return prepare_response(STATUS_OK, OTP_SENT, {"email": body.email})


@router.post("/verify-user", status_code=201)
async def verify_user(body: VerifyUserRequest):
    """
    Step 2 of signup: consume the OTP and create the account.
    """
    pending = await verify_otp(body.email, body.otp)
    if not pending or pending.get("purpose") == RESET_PURPOSE:
        raise ValidationError(INVALID_OTP)

    pending.update({"email": body.email, "status": "Verified", "is_verified": True})
    user = await query_service.create("User", pending)
    await delete_otps(body.email)

    logger.info(f"Account created for {body.email}")
    return JSONResponse(status_code=201, content=prepare_response(STATUS_CREATED, ACCOUNT_CREATED, user))


# ==============================================
# LOGIN
# ==============================================

@router.post("/login")
async def login(body: LoginRequest):
    user = await _authenticate(body)
    return prepare_response(STATUS_OK, LOGIN_SUCCESS, _login_payload(user))


@router.post("/admin-signin")
async def admin_signin(body: LoginRequest):
    user = await _authenticate(body)
    if user.get("role") != "Admin":
        raise ForbiddenError(ADMIN_ONLY)
    return prepare_response(STATUS_OK, LOGIN_SUCCESS, _login_payload(user))


# ==============================================
# PROFILE
# ==============================================

@router.get("/profile")
async def get_profile(user: Dict[str, Any] = Depends(get_current_user)):
    return prepare_response(STATUS_OK, USER_PROFILE, user)


@router.patch("/update-profile")
async def update_profile(body: ProfileUpdate, user: Dict[str, Any] = Depends(get_current_user)):
    changes = body.model_dump(exclude_unset=True, exclude={"current_password"})
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        raise ValidationError("No changes provided")

    if "password" in changes:
        if not body.current_password:
            raise ValidationError(CURRENT_PASSWORD_REQUIRED)
        account = await user_service.find_user_by_email(user["email"])
        if not account or not verify_password(body.current_password, account.get("password")):
            raise ForbiddenError(CURRENT_PASSWORD_INCORRECT)
        changes["password"] = hash_password(changes["password"])

    updated = await user_service.update_profile(user["id"], changes)
    return prepare_response(STATUS_OK, PROFILE_UPDATED, updated)


@router.delete("/delete-profile")
async def delete_profile(user: Dict[str, Any] = Depends(get_current_user)):
    if not await user_service.delete_user(user["id"]):
        raise ResourceNotFoundError(ACCOUNT_NOT_FOUND)
    return prepare_response(STATUS_OK, MSG_DELETED, None)


@router.get("/get-one-record/{user_id}")
async def get_one_profile(user_id: str):
    user = await user_service.get_user_by_id(user_id)
    if not user:
        raise ResourceNotFoundError(ACCOUNT_NOT_FOUND)
    return prepare_response(STATUS_OK, USER_PROFILE, user)


# ==============================================
# PASSWORD RESET
# ==============================================

@router.post("/forgot-password")
async def forgot_password(body: ForgotPasswordRequest):
    """
    Answers identically whether or not the account exists.
    """
    with LogContext(email=body.email):
        if await user_service.find_user_by_email(body.email):
            code = generate_otp()
            await store_otp(body.email, code, data={"email": body.email, "purpose": RESET_PURPOSE})
            await _send_otp(body.email, code, "Password reset")
            logger.info("Password reset OTP issued")
    return prepare_response(STATUS_OK, RESET_OTP_SENT, None)


@router.post("/reset-password")
async def reset_password(body: ResetPasswordRequest):
    payload = await verify_otp(body.email, body.otp)
    if not payload or payload.get("purpose") != RESET_PURPOSE:
        raise ValidationError(INVALID_OTP)

    if not await user_service.update_password(body.email, hash_password(body.new_password)):
        raise ResourceNotFoundError(ACCOUNT_NOT_FOUND)
    await delete_otps(body.email)

    logger.info(f"Password reset for {body.email}")
    return prepare_response(STATUS_OK, PASSWORD_RESET, None)


# ==============================================
# DOCUMENT UPLOAD
# ==============================================

@router.post("/upload-doc")
async def upload_doc(files: List[UploadFile] = File(...)):
    """
    Stores up to 5 files in GridFS.

    Returns:
        {"doc0": url, "doc1": url, ...}
    """
    if not files:
        raise ValidationError("No files uploaded")
    if len(files) > MAX_UPLOAD_FILES:
        raise ValidationError(f"Too many files (max {MAX_UPLOAD_FILES})")

    data = {}
    for index, upload in enumerate(files):
        content = await upload.read()
        if len(content) > MAX_UPLOAD_BYTES:
            raise ValidationError(f"{upload.filename} is too large (max 10MB)")

        stored = await storage_service.save_upload(upload.filename, content, upload.content_type)
        data[f"doc{index}"] = stored["url"]

    logger.info(f"Uploaded {len(data)} documents")
    return prepare_response(STATUS_OK, MSG_UPLOADED, data)
