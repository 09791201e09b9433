import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.exceptions import LivAbhiError
from app.main import app
from app.services import chatbot_service

client = TestClient(app)


def test_build_messages_keeps_recent_well_formed_history():
    history = [{"role": "user", "content": f"q{i}"} for i in range(12)]
    history += ["junk", {"role": "assistant"}, {"content": "no role"}]

    messages = chatbot_service.build_messages("What courses are there?", history)

    assert messages[0]["role"] == "system"
    assert messages[-1] == {"role": "user", "content": "What courses are there?"}
    assert len(messages) == 12
    assert messages[1]["content"] == "q2"


async def test_ask_without_api_key(monkeypatch):
    monkeypatch.setattr(settings, "GROQ_API_KEY", None)

    with pytest.raises(LivAbhiError) as exc:
        await chatbot_service.ask("hello")
    assert exc.value.status_code == 500


def test_ask_endpoint(monkeypatch):
    async def fake_ask(message, history=None):
        return f"echo: {message}"

    monkeypatch.setattr(chatbot_service, "ask", fake_ask)
    response = client.post("/api/chatbot/ask", json={"message": "  hi  "})

    assert response.status_code == 200
    assert response.json()["data"] == {"reply": "echo: hi"}


def test_ask_endpoint_rejects_blank_message():
    response = client.post("/api/chatbot/ask", json={"message": "   "})
    assert response.status_code == 422


def test_ask_endpoint_without_api_key(monkeypatch):
    monkeypatch.setattr(settings, "GROQ_API_KEY", None)

    response = client.post("/api/chatbot/ask", json={"message": "hello"})
    assert response.status_code == 500
    assert response.json()["error"] == "Missing GROQ_API_KEY"
