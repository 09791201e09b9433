from fastapi import APIRouter

from app.schemas.chatbot import ChatRequest
from app.schemas.response import prepare_response
from app.services import chatbot_service
from utils.constants import STATUS_OK

router = APIRouter()


@router.post("/ask")
async def ask(body: ChatRequest):
    reply = await chatbot_service.ask(body.message, body.history)
    return prepare_response(STATUS_OK, "Chatbot response generated", {"reply": reply})
