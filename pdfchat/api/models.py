"""
Request and response models for the PDF chat API.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pdfchat.chat.schemas import ChatSessionOut, PdfOut


class ChatRequest(BaseModel):
    """Request body for POST /api/chat."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    session_id: str = Field(
        ...,
        pattern=r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$",
        description="Chat session ID (UUID)",
    )
    question: str = Field(..., min_length=1, max_length=5000, description="User question")


class UploadResponse(BaseModel):
    """Response for POST /api/upload."""

    pdf: PdfOut
    session: ChatSessionOut


class ClearResponse(BaseModel):
    """Response for DELETE /api/chat/{session_id}/clear."""

    success: bool = True


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    status: str = "ok"
    backend_configured: bool = False
