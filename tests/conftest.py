import asyncio

import pytest
from bson import ObjectId
from mongomock_motor import AsyncMongoMockClient

from app.core.security import create_access_token, hash_password
from app.db import mongo
from app.services.mail_service import mail_service
from app.services.session_service import session_store
from app.services.telegram_service import telegram_service


@pytest.fixture(autouse=True)
def mock_db(monkeypatch):
    """In-memory Mongo for every test."""
    db = AsyncMongoMockClient()["livabhi_test"]
    monkeypatch.setattr(mongo, "_database", db)
    return db


@pytest.fixture(autouse=True)
def reset_sessions():
    session_store._sessions.clear()
    session_store._locks.clear()
    yield
    session_store._sessions.clear()
    session_store._locks.clear()


@pytest.fixture
def sent_otps(monkeypatch):
    """Captures OTP emails instead of sending them: {email: code}."""
    sent = {}

    async def fake_send(to, otp, purpose="Verification"):
        sent[to] = otp

    monkeypatch.setattr(mail_service, "send_otp_email", fake_send)
    return sent


@pytest.fixture
def bot_outbox(monkeypatch):
    """Records every Bot API call the dispatcher makes."""
    outbox = {"messages": [], "photos": [], "callbacks": [], "pre_checkout": []}

    async def send_message(chat_id, text, reply_markup=None, parse_mode=None):
        outbox["messages"].append({"chat_id": chat_id, "text": text, "reply_markup": reply_markup})
        return {"message_id": len(outbox["messages"])}

    async def send_photo(chat_id, photo, caption=None, reply_markup=None):
        outbox["photos"].append({"chat_id": chat_id, "photo": photo, "caption": caption})
        return {"message_id": len(outbox["photos"])}

    async def answer_callback_query(callback_query_id, text=None):
        outbox["callbacks"].append(callback_query_id)
        return True

    async def answer_pre_checkout_query(pre_checkout_query_id, ok=True, error_message=None):
        outbox["pre_checkout"].append((pre_checkout_query_id, ok))
        return True

    monkeypatch.setattr(telegram_service, "send_message", send_message)
    monkeypatch.setattr(telegram_service, "send_photo", send_photo)
    monkeypatch.setattr(telegram_service, "answer_callback_query", answer_callback_query)
    monkeypatch.setattr(telegram_service, "answer_pre_checkout_query", answer_pre_checkout_query)
    return outbox


def make_user(**overrides):
    user = {
        "_id": ObjectId(),
        "first_name": "Asha",
        "last_name": "Rao",
        "email": "asha@example.com",
        "password": hash_password("secret123"),
        "role": "User",
        "status": "Verified",
        "is_verified": True,
        "telegram": {},
    }
    user.update(overrides)
    return user


def insert_user(db, **overrides):
    """Stores a user synchronously (for TestClient tests) and returns it."""
    user = make_user(**overrides)
    asyncio.run(db.users.insert_one(user))
    return user


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}
