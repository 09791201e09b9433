from pydantic import BaseModel
from typing import Optional, Any

from fastapi.encoders import jsonable_encoder
from bson import ObjectId


class Envelope(BaseModel):
    """
    Standard response structure shared by every endpoint.
    """
    status: str
    message: str
    data: Optional[Any] = None
    error: Optional[Any] = None


def prepare_response(status: str, message: str, data: Any = None, error: Any = None) -> dict:
    """
    Builds a JSON-ready envelope. ObjectIds anywhere in `data` are rendered as strings.
    """
    envelope = Envelope(status=status, message=message, data=data, error=error)
    return jsonable_encoder(envelope.model_dump(), custom_encoder={ObjectId: str})
