import asyncio

from fastapi.testclient import TestClient

from app.main import app
from conftest import insert_user

client = TestClient(app)

CONTACT = {"name": "Ravi", "email": "ravi@example.com", "message": "Do you offer group classes?"}


def create_contact(**overrides):
    response = client.post("/api/ContactUs/create", json=dict(CONTACT, **overrides))
    assert response.status_code == 201
    return response.json()["data"]


def test_create_record():
    response = client.post("/api/ContactUs/create", json=CONTACT)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "CREATED"
    assert body["message"] == "Record added successfully"
    assert body["data"]["name"] == "Ravi"
    assert body["error"] is None


def test_create_record_validation_error():
    response = client.post("/api/ContactUs/create", json={"name": "Ravi"})

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "VALIDATION_ERROR"
    assert {"field": "email", "message": "Field required"} in body["error"]


def test_table_name_is_case_and_plural_insensitive():
    create_contact()

    for name in ("contactus", "CONTACTUS", "contact"):
        response = client.get(f"/api/{name}/get-all-record")
        assert response.status_code == 200
        assert len(response.json()["data"]) == 1


def test_get_all_filters_by_query_params():
    create_contact(name="Ravi")
    create_contact(name="Meera")

    rows = client.get("/api/ContactUs/get-all-record", params={"name": "Meera"}).json()["data"]
    assert [row["name"] for row in rows] == ["Meera"]


def test_insert_many():
    response = client.post("/api/ContactUs/insert-many", json=[CONTACT, dict(CONTACT, name="Meera")])

    assert response.status_code == 201
    assert len(response.json()["data"]) == 2


def test_update_record():
    record = create_contact()

    response = client.patch(f"/api/ContactUs/update-record/{record['id']}", json={"message": "Updated"})
    assert response.status_code == 200
    assert response.json()["data"]["matched_count"] == 1

    fetched = client.get(f"/api/ContactUs/get-one-record/{record['id']}").json()["data"]
    assert fetched["message"] == "Updated"


def test_update_missing_record_is_404():
    response = client.patch(
        "/api/ContactUs/update-record/000000000000000000000000", json={"message": "x"}
    )
    assert response.status_code == 404
    assert response.json()["message"] == "Record not found"


def test_delete_record():
    record = create_contact()

    assert client.delete(f"/api/ContactUs/delete-record/{record['id']}").status_code == 200
    assert client.delete(f"/api/ContactUs/delete-record/{record['id']}").status_code == 404
    assert client.get(f"/api/ContactUs/get-one-record/{record['id']}").status_code == 404


def test_get_one_with_invalid_id_is_404():
    create_contact()
    assert client.get("/api/ContactUs/get-one-record/not-an-id").status_code == 404


def test_search_one_record_returns_null_when_nothing_matches():
    create_contact()

    found = client.get("/api/ContactUs/search-one-record", params={"name": "Ravi"})
    assert found.json()["data"]["email"] == "ravi@example.com"

    missing = client.get("/api/ContactUs/search-one-record", params={"name": "Nobody"})
    assert missing.status_code == 200
    assert missing.json()["data"] is None


def test_search_record_paginates():
    for i in range(5):
        create_contact(message=f"Workshop question {i}")
    create_contact(message="Unrelated")

    response = client.post(
        "/api/ContactUs/search-record",
        json={"data": {"filter": "workshop", "fields": ["message"]}, "page": 0, "page_size": 2},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["count"] == 5
    assert len(data["rows"]) == 2


def test_search_record_rejects_negative_page():
    response = client.post("/api/ContactUs/search-record", json={"page": -1})
    assert response.status_code == 422


def test_user_records_never_expose_password(mock_db):
    insert_user(mock_db)

    rows = client.get("/api/User/get-all-record").json()["data"]
    assert rows[0]["email"] == "asha@example.com"
    assert "password" not in rows[0]


def test_duplicate_unique_field_conflicts(mock_db):
    asyncio.run(mock_db.payments.create_index("transaction_id", unique=True))
    payment = {
        "transaction_id": "pay_123",
        "amount": "499",
        "course_id": "65f1c0a2b3c4d5e6f7a8b9c0",
        "user_id": "65f1c0a2b3c4d5e6f7a8b9c1",
    }

    assert client.post("/api/Payment/create", json=payment).status_code == 201
    response = client.post("/api/Payment/create", json=payment)
    assert response.status_code == 409
    assert response.json()["status"] == "CONFLICT"


def test_populate_query_param(mock_db):
    user = insert_user(mock_db)
    payment = {
        "transaction_id": "pay_9",
        "amount": "10",
        "course_id": "65f1c0a2b3c4d5e6f7a8b9c0",
        "user_id": str(user["_id"]),
    }
    client.post("/api/Payment/create", json=payment)

    rows = client.get("/api/Payment/get-all-record", params={"populate": "user_id"}).json()["data"]
    assert rows[0]["user_id"]["email"] == "asha@example.com"

    rows = client.post(
        "/api/Payment/get-all-record-with-belongs-to", json={"second_table": "user_id"}
    ).json()["data"]
    assert rows[0]["user_id"]["first_name"] == "Asha"


def test_unknown_table_is_404():
    response = client.post("/api/Spaceship/create", json={"a": 1})
    assert response.status_code == 404
    assert "available_tables" in response.json()["error"]


def create_course(**overrides):
    owner = "64b7f0c2a1b2c3d4e5f60718"
    payload = {
        "user_id": owner,
        "instructor": owner,
        "first_name": "Asha",
        "last_name": "Rao",
        "title": "Watercolour Basics",
        "description": "Learn washes and layering",
        "course_type": "video",
        "category": "Art",
        "price": 499,
    }
    payload.update(overrides)
    response = client.post("/api/Course/create", json=payload)
    assert response.status_code == 201
    return response.json()["data"]


def test_query_params_are_cast_to_field_types():
    create_course(title="Live", is_published=True)
    create_course(title="Draft", price=99)

    published = client.get("/api/Course/get-all-record", params={"is_published": "true"}).json()["data"]
    assert [row["title"] for row in published] == ["Live"]

    priced = client.get("/api/Course/get-all-record", params={"price": "499"}).json()["data"]
    assert [row["title"] for row in priced] == ["Live"]

    one = client.get("/api/Course/search-one-record", params={"price": "99"}).json()["data"]
    assert one["title"] == "Draft"


def test_query_params_reject_unknown_fields_and_bad_values():
    create_course()

    bad_value = client.get("/api/Course/get-all-record", params={"price": "cheap"})
    assert bad_value.status_code == 400
    assert bad_value.json()["error"][0]["field"] == "price"

    unknown = client.get("/api/Course/get-all-record", params={"colour": "blue"})
    assert unknown.status_code == 400
    assert unknown.json()["error"] == [{"field": "colour", "message": "Unknown field for Course"}]


def test_update_rejects_values_the_schema_rejects():
    course = create_course()

    response = client.patch(f"/api/Course/update-record/{course['id']}", json={"price": "abc"})
    assert response.status_code == 400
    assert response.json()["error"][0]["field"] == "price"

    negative = client.patch(f"/api/Course/update-record/{course['id']}", json={"stock": -1})
    assert negative.status_code == 400

    stored = client.get(f"/api/Course/get-one-record/{course['id']}").json()["data"]
    assert stored["price"] == 499
    assert stored["stock"] == 0


def test_update_casts_and_blanks_values():
    course = create_course(thumbnail="http://cdn.example.com/a.jpg")

    response = client.patch(
        f"/api/Course/update-record/{course['id']}",
        json={"price": "250", "thumbnail": "", "is_published": "true", "not_a_field": 1},
    )
    assert response.status_code == 200

    stored = client.get(f"/api/Course/get-one-record/{course['id']}").json()["data"]
    assert stored["price"] == 250
    assert stored["thumbnail"] is None
    assert stored["is_published"] is True
    assert "not_a_field" not in stored


def test_update_runs_field_validators(mock_db):
    user = insert_user(mock_db)

    response = client.patch(f"/api/User/update-record/{user['_id']}", json={"email": "Asha.New@Example.COM"})
    assert response.status_code == 200

    stored = asyncio.run(mock_db.users.find_one({"_id": user["_id"]}))
    assert stored["email"] == "asha.new@example.com"
