import re
from datetime import datetime

import pytest

from utils.code_utils import generate_access_code, generate_course_code
from utils.telegram_utils import build_inline_keyboard, extract_media, extract_sender
from utils.time_utils import parse_date
from utils.validation_utils import parse_media_type, parse_non_negative_int, sanitize_input, validate_email


@pytest.mark.parametrize("text, expected", [("499", 499), (" 0 ", 0), ("4.5", None), ("-1", None), ("abc", None), ("", None)])
def test_parse_non_negative_int(text, expected):
    assert parse_non_negative_int(text) == expected


@pytest.mark.parametrize("text, expected", [("🖼 Image", "image"), ("VIDEO", "video"), ("pdf", "other"), ("song", None)])
def test_parse_media_type(text, expected):
    assert parse_media_type(text) == expected


def test_sanitize_input():
    assert sanitize_input("  <b>Sunset</b>   at   dusk ") == "bSunset/b at dusk"
    assert sanitize_input("x" * 10, max_length=4) == "xxxx"


def test_validate_email():
    assert validate_email("asha@example.com")
    assert not validate_email("asha@example")
    assert not validate_email("")


def test_codes():
    assert re.fullmatch(r"[A-Z0-9]{4}-[A-Z0-9]{4}", generate_course_code())
    assert generate_access_code("Oil painting").startswith("OIL-")
    assert generate_access_code("!!").startswith("CRS-")


def test_parse_date():
    assert parse_date("2025-01-02") == datetime(2025, 1, 2)
    assert parse_date("2025-01-02T05:30:00+05:30") == datetime(2025, 1, 2)
    assert parse_date("2025-01-02T00:00:00Z") == datetime(2025, 1, 2)
    assert parse_date("soon") is None


def test_extract_media_picks_largest_photo():
    media = extract_media({"photo": [{"file_id": "s"}, {"file_id": "l"}]})
    assert media["telegram_file_id"] == "l"
    assert media["mime_type"] == "image/jpeg"

    doc = extract_media({"document": {"file_id": "d", "file_name": "a.zip", "mime_type": "application/zip"}})
    assert doc["original_name"] == "a.zip"
    assert extract_media({"text": "hi"}) is None


def test_extract_sender_prefers_callback_presser():
    update = {
        "callback_query": {"from": {"id": 1}, "message": {"from": {"id": 999}, "chat": {"id": 1}}},
    }
    assert extract_sender(update) == {"id": 1}


def test_inline_keyboard_drops_unknown_keys():
    keyboard = build_inline_keyboard([[{"text": "OK", "callback_data": "ok", "color": "red"}]])
    assert keyboard == {"inline_keyboard": [[{"text": "OK", "callback_data": "ok"}]]}
