import pytest
from bson import ObjectId

from app.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from app.services import query_service


def contact(i, message="hello world"):
    return {"name": f"Visitor {i}", "email": f"visitor{i}@example.com", "message": f"{message} {i}"}


def course_payload(owner_id, **overrides):
    payload = {
        "user_id": str(owner_id),
        "instructor": str(owner_id),
        "first_name": "Asha",
        "last_name": "Rao",
        "title": "Watercolour Basics",
        "description": "Learn washes and layering",
        "course_type": "video",
        "category": "Art",
        "price": 499,
    }
    payload.update(overrides)
    return payload


async def test_create_renders_id_and_timestamps(mock_db):
    record = await query_service.create("ContactUs", contact(1))

    assert ObjectId.is_valid(record["id"])
    assert record["email"] == "visitor1@example.com"
    assert record["created_at"] == record["updated_at"]
    assert await mock_db.contactus.count_documents({}) == 1


async def test_create_rejects_invalid_payload():
    with pytest.raises(ValidationError) as exc:
        await query_service.create("ContactUs", {"name": "No message"})

    fields = {err["field"] for err in exc.value.details}
    assert {"email", "message"} <= fields


async def test_create_ignores_client_supplied_id():
    record = await query_service.create("ContactUs", dict(contact(1), id="not-mine", _id="nope"))
    assert record["id"] not in ("not-mine", "nope")


async def test_create_unknown_table():
    with pytest.raises(ResourceNotFoundError):
        await query_service.create("Spaceship", {})


async def test_duplicate_email_conflicts(mock_db):
    await mock_db.users.create_index("email", unique=True)
    user = {"first_name": "Asha", "last_name": "Rao", "email": "Asha@Example.com", "password": "hashed"}

    created = await query_service.create("User", user)
    assert "password" not in created

    with pytest.raises(ConflictError):
        await query_service.create("User", dict(user, email="asha@example.com"))
    assert await mock_db.users.count_documents({}) == 1


async def test_bulk_create_requires_records():
    with pytest.raises(ValidationError):
        await query_service.bulk_create("ContactUs", [])

    rows = await query_service.bulk_create("ContactUs", [contact(1), contact(2)])
    assert len(rows) == 2


async def test_search_paginates_and_counts():
    for i in range(5):
        await query_service.create("ContactUs", contact(i))
    await query_service.create("ContactUs", contact(9, message="unrelated"))

    result = await query_service.search(
        "ContactUs", {"filter": "HELLO", "fields": ["message"]}, page=0, page_size=2
    )
    assert len(result["rows"]) == 2
    assert result["count"] == 5

    last_page = await query_service.search(
        "ContactUs", {"filter": "hello", "fields": "message"}, page=2, page_size=2
    )
    assert len(last_page["rows"]) == 1


async def test_search_treats_filter_as_literal_text():
    await query_service.create("ContactUs", contact(1, message="abc"))
    await query_service.create("ContactUs", contact(2, message="a.c"))

    result = await query_service.search("ContactUs", {"filter": "a.c", "fields": ["message"]})
    assert result["count"] == 1
    assert result["rows"][0]["message"].startswith("a.c")


async def test_search_orders_ascending():
    for name in ("Charlie", "Alpha", "Bravo"):
        await query_service.create("ContactUs", {"name": name, "email": "x@example.com", "message": "hi"})

    result = await query_service.search("ContactUs", {}, order=[["name", "ASC"]])
    assert [row["name"] for row in result["rows"]] == ["Alpha", "Bravo", "Charlie"]


async def test_update_and_delete_report_counts():
    record = await query_service.create("ContactUs", contact(1))

    result = await query_service.update("ContactUs", {"id": record["id"]}, {"name": "Renamed"})
    assert result == {"matched_count": 1, "modified_count": 1}
    assert (await query_service.get_one("ContactUs", {"id": record["id"]}))["name"] == "Renamed"

    missing = await query_service.update("ContactUs", {"id": str(ObjectId())}, {"name": "x"})
    assert missing["matched_count"] == 0

    assert (await query_service.delete("ContactUs", {"id": record["id"]}))["deleted_count"] == 1
    assert (await query_service.delete("ContactUs", {"id": record["id"]}))["deleted_count"] == 0


async def test_invalid_id_matches_nothing():
    await query_service.create("ContactUs", contact(1))

    assert await query_service.get_one("ContactUs", {"id": "not-an-object-id"}) is None
    result = await query_service.update("ContactUs", {"id": "not-an-object-id"}, {"name": "x"})
    assert result["matched_count"] == 0


async def test_get_all_date_filter():
    owner = ObjectId()
    await query_service.create("Course", course_payload(owner, title="Old", release_date="2024-01-01"))
    await query_service.create("Course", course_payload(owner, title="New", release_date="2025-06-01"))

    rows = await query_service.get_all(
        "Course", {"field_name": "release_date", "field_value": "2025-01-01"}
    )
    assert [row["title"] for row in rows] == ["New"]


async def test_get_all_rejects_bad_date():
    with pytest.raises(ValidationError):
        await query_service.get_all("Course", {"field_name": "release_date", "field_value": "soon"})


async def test_populate_forward_relation_hides_password(mock_db):
    user = await query_service.create(
        "User", {"first_name": "Asha", "last_name": "Rao", "email": "asha@example.com", "password": "hashed"}
    )
    course = await query_service.create("Course", course_payload(user["id"]))
    await query_service.create(
        "Payment",
        {"transaction_id": "pay_1", "amount": 499, "course_id": course["id"], "user_id": user["id"]},
    )

    rows = await query_service.get_all_with_relation("Payment", {}, "user_id,course_id")
    assert rows[0]["user_id"]["email"] == "asha@example.com"
    assert "password" not in rows[0]["user_id"]
    assert rows[0]["course_id"]["title"] == "Watercolour Basics"
    assert rows[0]["amount"] == "499"


async def test_populate_reverse_relation():
    user = await query_service.create(
        "User", {"first_name": "Asha", "last_name": "Rao", "email": "asha@example.com", "password": "hashed"}
    )
    await query_service.create("Course", course_payload(user["id"]))

    record = await query_service.get_one_with_relation("User", {"id": user["id"]}, "courses")
    assert len(record["courses"]) == 1
    assert record["courses"][0]["user_id"] == user["id"]


async def test_populate_unknown_relation_leaves_rows_unpopulated():
    owner_id = str(ObjectId())
    await query_service.create(
        "Payment", {"transaction_id": "pay_2", "amount": "10", "course_id": str(ObjectId()), "user_id": owner_id}
    )

    rows = await query_service.get_all_with_relation("Payment", {}, "nonsense")
    assert rows[0]["user_id"] == owner_id


async def test_find_and_count_with_limit_and_offset():
    for i in range(4):
        await query_service.create("ContactUs", contact(i))

    result = await query_service.find_and_count("ContactUs", {}, order=[["name", "ASC"]], limit=2, offset=1)
    assert result["count"] == 4
    assert [row["name"] for row in result["rows"]] == ["Visitor 1", "Visitor 2"]


async def test_get_all_by_attr_projects_fields():
    await query_service.create("ContactUs", contact(1))

    rows = await query_service.get_all_by_attr("ContactUs", ["name"])
    assert set(rows[0]) == {"id", "name"}
