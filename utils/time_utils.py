"""
utils/time_utils.py

Purpose: Time and expiry helpers

- Naive UTC "now" (what Mongo hands back)
- Session idle checks
- OTP expiry calculation
- Lenient date parsing for query filters
"""

from datetime import datetime, timedelta
from typing import Any, Optional


def utc_now() -> datetime:
    return datetime.utcnow()


def is_session_expired(last_interaction: Optional[datetime], timeout_minutes: int = 30) -> bool:
    """
    Checks if a session has expired based on last interaction time.
    """
    if not last_interaction:
        return True

    expiry_time = last_interaction + timedelta(minutes=timeout_minutes)
    return utc_now() > expiry_time


def calculate_otp_expiry(validity_minutes: int = 5, issued_at: Optional[datetime] = None) -> datetime:
    """
    Calculates OTP expiry timestamp.
    """
    return (issued_at or utc_now()) + timedelta(minutes=validity_minutes)


def parse_date(value: Any) -> Optional[datetime]:
    """
    Parses an ISO date or datetime string (a trailing 'Z' is accepted).
    Returns None when the value cannot be read as a date.
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1]
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    # Stored timestamps are naive UTC
    if parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None) - (parsed.utcoffset() or timedelta(0))
    return parsed
