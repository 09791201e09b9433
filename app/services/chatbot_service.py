"""
app/services/chatbot_service.py

Purpose: Platform assistant backed by Groq chat completions
"""

from typing import Any, Dict, List, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import ExternalServiceError, LivAbhiError
from app.core.logging import get_logger

logger = get_logger(__name__)

HISTORY_LIMIT = 10

SYSTEM_PROMPT = (
    "You are the Liv Abhi platform assistant. Help users with courses, movies, "
    "jobs, and general support questions about Liv Abhi. Keep answers concise and friendly."
)


def build_messages(message: str, history: Optional[List[Any]] = None) -> List[Dict[str, str]]:
    """
    System prompt + the last well-formed history items + the new message.
    """
    cleaned = [
        {"role": item["role"], "content": item["content"]}
        for item in (history or [])
        if isinstance(item, dict) and item.get("role") and item.get("content")
    ]
    return (
        [{"role": "system", "content": SYSTEM_PROMPT}]
        + cleaned[-HISTORY_LIMIT:]
        + [{"role": "user", "content": message}]
    )


async def ask(message: str, history: Optional[List[Any]] = None) -> str:
    """
    Returns the assistant reply.

    Raises:
        LivAbhiError: API key missing (500)
        ExternalServiceError: Groq failed or replied with nothing
    """
    if not settings.GROQ_API_KEY:
        raise LivAbhiError(
            "Chatbot is not configured. Missing Groq API key",
            details="Missing GROQ_API_KEY",
        )

    payload = {
        "model": settings.GROQ_MODEL,
        "messages": build_messages(message, history),
        "temperature": 0.4,
        "max_tokens": 512,
    }

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                settings.GROQ_API_URL,
                json=payload,
                headers={"Authorization": f"Bearer {settings.GROQ_API_KEY}"},
                timeout=30.0,
            )
    except httpx.HTTPError as e:
        logger.error(f"Groq chatbot error: {e}")
        raise ExternalServiceError("Failed to generate chatbot response")

    if response.status_code != 200:
        logger.error(f"Groq chatbot error: {response.status_code} - {response.text}")
        raise ExternalServiceError(
            "Failed to generate chatbot response", details={"status": response.status_code}
        )

    choices = response.json().get("choices") or [{}]
    reply = ((choices[0].get("message") or {}).get("content") or "").strip()
    if not reply:
        raise ExternalServiceError("Groq API returned an empty response")
    return reply
