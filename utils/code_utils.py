"""
utils/code_utils.py

Purpose: Human-shareable course codes

- Course code: XXXX-XXXX from [A-Z0-9]
- Access code: first three title letters/digits + six hex digits (e.g. PAI-3F9A0C)
"""

import re
import secrets
import string

COURSE_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_course_code() -> str:
    chars = [secrets.choice(COURSE_CODE_ALPHABET) for _ in range(8)]
    return "".join(chars[:4]) + "-" + "".join(chars[4:])


def generate_access_code(title: str = None) -> str:
    prefix = re.sub(r"[^a-zA-Z0-9]", "", title or "")[:3].upper() or "CRS"
    return f"{prefix}-{secrets.token_hex(3).upper()}"
