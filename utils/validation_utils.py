"""
utils/validation_utils.py

Purpose: Input validation

- Non-negative integer parsing for bot price / stock input
- Media type choice parsing
- Email format check
- Input sanitization
"""

import re
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def parse_non_negative_int(text: str) -> Optional[int]:
    """
    Parses a whole number >= 0.

    Args:
        text: Raw user input ("499", " 0 ")

    Returns:
        The number, or None for anything else ("4.5", "-1", "abc", "")
    """
    if text is None:
        return None

    text = text.strip()
    if not re.match(r"^\d+$", text):
        return None
    return int(text)


def parse_media_type(text: str) -> Optional[str]:
    """
    Maps a media type answer onto "image", "video" or "other".
    Button captions ("🖼 Image") and plain words both work.
    """
    lowered = (text or "").lower()
    if "image" in lowered:
        return "image"
    if "video" in lowered:
        return "video"
    if any(word in lowered for word in ("other", "pdf", "zip")):
        return "other"
    return None


def validate_email(email: str) -> bool:
    if not email:
        return False
    return bool(EMAIL_PATTERN.match(email.strip()))


def sanitize_input(text: str, max_length: int = 1000) -> str:
    """
    Trims input, strips markup characters and normalizes whitespace.

    Args:
        text: Input text
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    # Trim to max length
    text = text[:max_length]

    text = re.sub(r"[<>{}\[\]]", "", text)

    # Normalize whitespace
    text = " ".join(text.split())

    return text.strip()
