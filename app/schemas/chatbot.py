from pydantic import BaseModel, Field, validator
from typing import Any, List


class ChatRequest(BaseModel):
    message: str
    history: List[Any] = Field(default_factory=list)

    @validator("message")
    def message_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Message is required")
        return v.strip()
