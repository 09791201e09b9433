import asyncio

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from app.main import app
from app.services import query_service
from app.services.telegram_service import telegram_service
from conftest import auth_headers, insert_user

client = TestClient(app)


@pytest.fixture
def fake_storage(monkeypatch):
    captions = []

    async def upload_document(original_name, content, mime_type, caption=None):
        captions.append(caption)
        return {"file_id": f"tg-{len(captions)}", "message_id": 70 + len(captions)}

    async def get_file_link(file_id):
        return f"https://api.telegram.org/file/botTOKEN/documents/{file_id}.pdf"

    monkeypatch.setattr(telegram_service, "upload_document", upload_document)
    monkeypatch.setattr(telegram_service, "get_file_link", get_file_link)
    return captions


def create_course(owner):
    owner_id = str(owner["_id"])
    return asyncio.run(
        query_service.create(
            "Course",
            {
                "user_id": owner_id,
                "instructor": owner_id,
                "first_name": owner["first_name"],
                "last_name": owner["last_name"],
                "title": "Clay Modelling",
                "description": "Hand building basics",
                "course_type": "pdf",
                "category": "Craft",
                "price": 0,
            },
        )
    )


def upload(course_id, user, filename="notes.pdf", mime_type="application/pdf", description=None):
    data = {"course_id": course_id}
    if description:
        data["description"] = description
    return client.post(
        "/api/telegram-files/upload",
        files={"file": (filename, b"%PDF-1.4 notes", mime_type)},
        data=data,
        headers=auth_headers(user),
    )


def test_upload_then_link(mock_db, fake_storage):
    artist = insert_user(mock_db, role="Artist")
    course = create_course(artist)

    response = upload(course["id"], artist)
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["telegram_file_id"] == "tg-1"
    assert data["filename"] == "notes.pdf"
    assert fake_storage == ["Clay Modelling"]

    stored_course = asyncio.run(mock_db.courses.find_one({"_id": ObjectId(course["id"])}))
    assert stored_course["files"] == [ObjectId(data["file_id"])]

    link = client.get(f"/api/telegram-files/{data['file_id']}/link", headers=auth_headers(artist))
    assert link.status_code == 200
    assert link.json()["data"]["url"].endswith("tg-1.pdf")

    record = asyncio.run(mock_db.telegram_files.find_one({"_id": ObjectId(data["file_id"])}))
    assert record["download_count"] == 1
    assert record["last_accessed"] is not None


def test_description_becomes_caption(mock_db, fake_storage):
    artist = insert_user(mock_db, role="Artist")
    course = create_course(artist)

    assert upload(course["id"], artist, description="Week 1 handout").status_code == 201
    assert fake_storage == ["Week 1 handout"]


def test_only_own_courses(mock_db, fake_storage):
    owner = insert_user(mock_db, role="Artist")
    other = insert_user(mock_db, role="Artist", email="other@example.com")
    course = create_course(owner)

    assert upload(course["id"], other).status_code == 403

    admin = insert_user(mock_db, role="Admin", email="admin@example.com")
    assert upload(course["id"], admin).status_code == 201


def test_rejects_disallowed_mime_type(mock_db, fake_storage):
    artist = insert_user(mock_db, role="Artist")
    course = create_course(artist)

    response = upload(course["id"], artist, filename="run.exe", mime_type="application/x-msdownload")
    assert response.status_code == 400
    assert fake_storage == []


def test_plain_user_cannot_upload(mock_db, fake_storage):
    user = insert_user(mock_db)
    course = create_course(user)

    assert upload(course["id"], user).status_code == 403


def test_link_for_missing_file(mock_db):
    user = insert_user(mock_db)
    response = client.get(f"/api/telegram-files/{ObjectId()}/link", headers=auth_headers(user))
    assert response.status_code == 404
