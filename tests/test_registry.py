import pytest

from app.core.exceptions import ResourceNotFoundError
from app.models.registry import TABLES, get_table, normalize_table_name


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("User", "User"),
        ("user", "User"),
        ("CONTACTUS", "ContactUs"),
        ("Users", "User"),
        ("courses", "Course"),
        ("movies", "Movie"),
        ("news", "NewsAndBlogs"),
        ("blogs", "NewsAndBlogs"),
    ],
)
def test_normalize_table_name(raw, expected):
    assert normalize_table_name(raw) == expected


def test_unknown_table_raises_with_available_list():
    with pytest.raises(ResourceNotFoundError) as exc:
        normalize_table_name("Spaceship")

    assert exc.value.status_code == 404
    assert exc.value.details["available_tables"] == sorted(TABLES)


def test_get_table_returns_spec():
    spec = get_table("payments")
    assert spec.collection == "payments"
    assert spec.get_relation("user_id").target == "User"
    assert spec.get_relation("nope") is None


def test_user_password_is_hidden():
    assert "password" in get_table("User").hidden_fields
