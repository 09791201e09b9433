"""
app/schemas/auth.py

Purpose: Account and OTP request bodies

- Signup and OTP verification
- Login / admin login
- Profile update and password reset
"""

from pydantic import BaseModel, Field, validator
from typing import Literal, Optional

from utils.validation_utils import validate_email


def _email(value: str) -> str:
    if not validate_email(value):
        raise ValueError("Invalid email address")
    return value.strip().lower()


class RegisterRequest(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: str
    password: str = Field(..., min_length=6, max_length=100)
    role: Literal["User", "Artist", "Business"] = "User"
    profile_image: Optional[str] = None

    @validator("email")
    def check_email(cls, v):
        return _email(v)

    class Config:
        json_schema_extra = {
            "example": {
                "first_name": "Asha",
                "last_name": "Rao",
                "email": "asha@example.com",
                "password": "secret123",
                "role": "Artist",
            }
        }


class VerifyUserRequest(BaseModel):
    email: str
    otp: str = Field(..., min_length=4, max_length=10)

    @validator("email")
    def check_email(cls, v):
        return _email(v)


class LoginRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=1)

    @validator("email")
    def check_email(cls, v):
        return _email(v)


class ProfileUpdate(BaseModel):
    """
    Every field is optional; `current_password` is required only when
    `password` is being changed.
    """
    first_name: Optional[str] = Field(default=None, max_length=50)
    last_name: Optional[str] = Field(default=None, max_length=50)
    email: Optional[str] = None
    profile_image: Optional[str] = Field(default=None, max_length=300)
    password: Optional[str] = Field(default=None, min_length=6, max_length=100)
    current_password: Optional[str] = None

    @validator("email")
    def check_email(cls, v):
        return _email(v) if v is not None else v


class ForgotPasswordRequest(BaseModel):
    email: str

    @validator("email")
    def check_email(cls, v):
        return _email(v)


class ResetPasswordRequest(BaseModel):
    email: str
    otp: str = Field(..., min_length=4, max_length=10)
    new_password: str = Field(..., min_length=6, max_length=100)

    @validator("email")
    def check_email(cls, v):
        return _email(v)
