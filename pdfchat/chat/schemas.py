"""
Wire shapes for stored records.

Keys are camelCase so the browser client and the SSE ``complete`` frame see
the same message object the history endpoint returns.
"""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class CitationOut(_WireModel):
    """Page citation attached to an assistant message."""

    page: int
    text: str


class ChatMessageOut(_WireModel):
    id: str
    session_id: str
    role: str
    content: str
    citations: Optional[List[CitationOut]] = None
    created_at: dt.datetime


class PdfOut(_WireModel):
    id: str
    filename: str
    original_name: str
    file_size: int
    page_count: int
    uploaded_at: dt.datetime


class ChatSessionOut(_WireModel):
    id: str
    pdf_id: str
    created_at: dt.datetime
    updated_at: dt.datetime
