from typing import Optional, Any


class LivAbhiError(Exception):
    """
    Base exception for the LivAbhi API.

    Subclasses pin `code` and `status_code`; both end up in the response
    envelope rendered by app.core.errors.
    """
    code = "SERVER_ERROR"
    status_code = 500
    default_message = "An internal error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
    ):
        self.message = message or self.default_message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.details = details
        super().__init__(self.message)

    @property
    def error_payload(self) -> Any:
        return self.details if self.details is not None else self.message


class ResourceNotFoundError(LivAbhiError):
    """Unknown table, record, course or file."""
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Resource not found"


class ValidationError(LivAbhiError):
    """Document rejected by its schema, or malformed input."""
    code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Validation error"


class ConflictError(LivAbhiError):
    code = "CONFLICT"
    status_code = 409
    default_message = "Duplicate entry. This record already exists."


class AuthenticationError(LivAbhiError):
    code = "UNAUTHORIZED"
    status_code = 401
    default_message = "Authentication failed"


class ForbiddenError(LivAbhiError):
    code = "FORBIDDEN"
    status_code = 403
    default_message = "Access denied"


class ExternalServiceError(LivAbhiError):
    """Telegram, Razorpay, Groq or SMTP failed."""
    code = "EXTERNAL_SERVICE_ERROR"
    status_code = 502
    default_message = "External service error"
