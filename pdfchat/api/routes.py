"""
API routes: upload, PDF file, chat stream, chat history, health.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import aclosing
from typing import AsyncIterator, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import FileResponse, StreamingResponse

from pdfchat.chat.schemas import ChatMessageOut, ChatSessionOut, PdfOut
from pdfchat.chat.service import ChatService, DocumentNotFoundError, SessionNotFoundError
from pdfchat.config import Settings
from pdfchat.db.storage import ChatStorage
from pdfchat.documents.processor import (
    PDFProcessingError,
    ensure_upload_dir,
    get_pdf_path,
    process_pdf,
)
from pdfchat.generation import AnswerGenerator

from .deps import get_chat_service, get_generator, get_settings, get_storage
from .models import ChatRequest, ClearResponse, HealthResponse, UploadResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])

PDF_CONTENT_TYPE = "application/pdf"
UPLOAD_READ_SIZE = 1024 * 1024


@router.get("/health", response_model=HealthResponse)
async def health(generator: Optional[AnswerGenerator] = Depends(get_generator)) -> HealthResponse:
    """Health check."""
    return HealthResponse(status="ok", backend_configured=generator is not None)


@router.post("/upload", response_model=UploadResponse)
async def upload_pdf(
    pdf: UploadFile = File(...),
    settings: Settings = Depends(get_settings),
    storage: ChatStorage = Depends(get_storage),
) -> UploadResponse:
    """Store an uploaded PDF, extract its text and open a chat session for it."""
    if pdf.content_type != PDF_CONTENT_TYPE:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only PDF files are allowed")

    upload_dir = ensure_upload_dir(settings.upload_dir)
    filename = f"{uuid.uuid4().hex}.pdf"
    path = get_pdf_path(upload_dir, filename)

    size = 0
    with path.open("wb") as out:
        while chunk := await pdf.read(UPLOAD_READ_SIZE):
            size += len(chunk)
            if size > settings.max_upload_bytes:
                break
            await asyncio.to_thread(out.write, chunk)
    if size > settings.max_upload_bytes or size == 0:
        path.unlink(missing_ok=True)
        if size == 0:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {settings.max_upload_size_mb:g} MB limit",
        )

    try:
        metadata = await asyncio.to_thread(process_pdf, path)
    except PDFProcessingError as e:
        path.unlink(missing_ok=True)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    record = None
    try:
        record = await storage.create_pdf(
            filename=filename,
            original_name=pdf.filename or filename,
            file_size=size,
            page_count=metadata.page_count,
            text_content=metadata.text_content,
        )
        session = await storage.create_chat_session(record.id)
    except Exception:
        logger.exception("Failed to store upload %s; removing it", filename)
        path.unlink(missing_ok=True)
        if record is not None:
            await storage.delete_pdf(record.id)
        raise
    logger.info("Uploaded %s (%s pages) as pdf %s", record.original_name, record.page_count, record.id)
    return UploadResponse(
        pdf=PdfOut.model_validate(record),
        session=ChatSessionOut.model_validate(session),
    )


@router.get("/pdfs/{pdf_id}/file")
async def get_pdf_file(
    pdf_id: str,
    settings: Settings = Depends(get_settings),
    storage: ChatStorage = Depends(get_storage),
) -> FileResponse:
    """Serve the stored PDF for the viewer."""
    record = await storage.get_pdf(pdf_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="PDF not found")
    path = get_pdf_path(settings.upload_dir, record.filename)
    if not path.exists():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="PDF file missing")
    return FileResponse(path, media_type=PDF_CONTENT_TYPE, filename=record.original_name)


@router.get("/chat/{session_id}/messages", response_model=List[ChatMessageOut])
async def get_messages(
    session_id: str,
    storage: ChatStorage = Depends(get_storage),
) -> List[ChatMessageOut]:
    """Stored messages of a session, oldest first."""
    messages = await storage.get_chat_messages(session_id)
    return [ChatMessageOut.model_validate(m) for m in messages]


async def stream_until_disconnect(
    request: Request,
    frames: AsyncIterator[str],
    session_id: str,
) -> AsyncIterator[str]:
    """Relay frames until the client goes away, then close the frame source."""
    async with aclosing(frames):
        async for frame in frames:
            if await request.is_disconnected():
                logger.info("Client disconnected from session %s; stopping stream", session_id)
                break
            yield frame


@router.post("/chat")
async def chat(
    request: Request,
    body: ChatRequest,
    service: ChatService = Depends(get_chat_service),
) -> StreamingResponse:
    """Stream the answer via SSE; the final frame carries the stored message or an error."""
    try:
        turn = await service.prepare(body.session_id, body.question)
    except (SessionNotFoundError, DocumentNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    return StreamingResponse(
        stream_until_disconnect(request, service.stream_frames(turn), turn.session_id),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.delete("/chat/{session_id}/clear", response_model=ClearResponse)
async def clear_chat(
    session_id: str,
    storage: ChatStorage = Depends(get_storage),
) -> ClearResponse:
    """Delete all messages of a session."""
    await storage.clear_chat_messages(session_id)
    return ClearResponse(success=True)
