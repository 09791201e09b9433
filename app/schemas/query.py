"""
app/schemas/query.py

Purpose: Request bodies for the generic table routes
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class SearchRequest(BaseModel):
    """
    Body of POST /api/{table}/search-record.

    `data` holds equality conditions plus the optional `filter` text and
    `fields` to match it against.
    """
    data: Dict[str, Any] = Field(default_factory=dict)
    page: int = Field(default=0, ge=0)
    page_size: int = Field(default=50, ge=1)
    order: Optional[List[List[str]]] = Field(
        default=None,
        description='Sort spec, e.g. [["created_at", "DESC"]]'
    )

    class Config:
        json_schema_extra = {
            "example": {
                "data": {"filter": "python", "fields": ["title", "description"], "category": "Tech"},
                "page": 0,
                "page_size": 20,
                "order": [["price", "ASC"]],
            }
        }
