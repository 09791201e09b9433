"""
app/models/base.py

Purpose: Shared pieces for document schemas

- DocumentSchema base (unknown fields dropped, ObjectId allowed)
- ObjectIdField: accepts ObjectId or a valid 24-char hex string
"""

from datetime import datetime
from typing import Any, Annotated, Optional

from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict


def to_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise ValueError(f"'{value}' is not a valid ObjectId")


ObjectIdField = Annotated[ObjectId, BeforeValidator(to_object_id)]


class DocumentSchema(BaseModel):
    """
    Base class for every persisted document.
    Unknown keys are dropped, the way a strict Mongoose schema behaves.
    """
    model_config = ConfigDict(extra="ignore", arbitrary_types_allowed=True)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
