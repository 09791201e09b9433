"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, secrets, third-party keys)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, validator
from pydantic_settings import BaseSettings
from typing import Optional, Literal


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production", "test"] = "development"

    # MongoDB
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB_NAME: str = Field(
        default="livabhi",
        description="MongoDB database name"
    )

    # Auth
    JWT_SECRET_KEY: str = Field(
        default="change-me-in-production",
        description="Secret used to sign access tokens"
    )
    JWT_ALGORITHM: str = Field(default="HS256")
    JWT_EXPIRES_DAYS: int = Field(
        default=7,
        description="Access token lifetime in days"
    )
    OTP_EXPIRY_MINUTES: int = Field(
        default=5,
        description="Signup / reset OTP validity window"
    )

    # Public URLs
    BASE_URL: str = Field(
        default="http://localhost:4000",
        description="Public base URL of this API (used for upload links and internal calls)"
    )
    SITE_URL: str = Field(
        default="http://localhost:3000",
        description="Storefront URL used in bot replies"
    )
    APP_NAME: str = Field(default="Liv Abhi")

    # Mail (SMTP)
    SMTP_HOST: str = Field(default="smtp.gmail.com")
    SMTP_PORT: int = Field(default=587)
    SMTP_USER: Optional[str] = Field(default=None)
    SMTP_PASSWORD: Optional[str] = Field(default=None)
    SMTP_USE_SSL: bool = Field(
        default=False,
        description="Use implicit TLS (port 465) instead of STARTTLS"
    )
    MAIL_FROM: Optional[str] = Field(default=None)

    # Telegram
    TELEGRAM_BOT_TOKEN: Optional[str] = Field(
        default=None,
        description="Bot token for the artist upload bot and file storage"
    )
    TELEGRAM_STORAGE_CHAT_ID: Optional[str] = Field(
        default=None,
        description="Private channel/chat used as file storage"
    )
    TELEGRAM_API_BASE: str = Field(default="https://api.telegram.org")
    TELEGRAM_POLLING: bool = Field(
        default=False,
        description="Run the getUpdates long-poller instead of relying on the webhook"
    )
    TELEGRAM_POLL_TIMEOUT: int = Field(default=30)

    # Razorpay
    RAZORPAY_KEY_ID: Optional[str] = Field(default=None)
    RAZORPAY_KEY_SECRET: Optional[str] = Field(default=None)
    RAZORPAY_BASE_URL: str = Field(default="https://api.razorpay.com/v1")

    # Groq chatbot
    GROQ_API_KEY: Optional[str] = Field(default=None)
    GROQ_MODEL: str = Field(default="llama-3.1-8b-instant")
    GROQ_API_URL: str = Field(default="https://api.groq.com/openai/v1/chat/completions")

    # Maintenance
    SESSION_TIMEOUT_MINUTES: int = Field(
        default=30,
        description="Idle bot upload sessions are dropped after this many minutes"
    )
    OTP_CLEANUP_INTERVAL_SECONDS: int = Field(
        default=600,
        description="How often expired OTPs and idle bot sessions are purged"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    PORT: int = Field(default=4000, description="Port used when running app.main directly")
    API_PREFIX: str = Field(
        default="/api",
        description="API route prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @validator("JWT_SECRET_KEY")
    def validate_jwt_secret(cls, v, values):
        """Ensure the signing key is changed in production."""
        if values.get("ENVIRONMENT") == "production" and v == "change-me-in-production":
            raise ValueError("JWT_SECRET_KEY must be changed in production environment")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.TELEGRAM_BOT_TOKEN)

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if not settings.MONGODB_URL:
        errors.append("MONGODB_URL is required")

    if not settings.BASE_URL:
        errors.append("BASE_URL is required")

    if settings.TELEGRAM_POLLING and not settings.TELEGRAM_BOT_TOKEN:
        errors.append("TELEGRAM_BOT_TOKEN is required when TELEGRAM_POLLING is enabled")

    # Production-specific validations
    if settings.is_production:
        if not settings.SMTP_USER or not settings.SMTP_PASSWORD:
            errors.append("SMTP_USER and SMTP_PASSWORD are required in production")
        if not settings.RAZORPAY_KEY_SECRET:
            errors.append("RAZORPAY_KEY_SECRET is required in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
