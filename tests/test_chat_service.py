"""
Tests for the chat service: validation, persistence and SSE framing.
"""

from __future__ import annotations

from typing import List

import pytest

from pdfchat.generation.sse import SSEDecoder
from pdfchat.chat.service import (
    PERSIST_FAILED_MESSAGE,
    ChatService,
    DocumentNotFoundError,
    SessionNotFoundError,
)
from pdfchat.db.storage import ChatStorage
from pdfchat.generation import AnswerGenerator


async def _session(storage: ChatStorage) -> str:
    pdf = await storage.create_pdf(
        filename="f.pdf",
        original_name="cats.pdf",
        file_size=10,
        page_count=1,
        text_content="[Page 1]\nThe cat sat on the mat.",
    )
    session = await storage.create_chat_session(pdf.id)
    return session.id


async def _frames(service: ChatService, session_id: str, question: str) -> List[dict]:
    turn = await service.prepare(session_id, question)
    decoder = SSEDecoder()
    payloads = []
    async for frame in service.stream_frames(turn):
        payloads.extend(decoder.feed(frame))
    payloads.extend(decoder.close())
    return payloads


@pytest.mark.anyio
async def test_successful_answer_is_streamed_and_saved(storage: ChatStorage, backend_factory):
    backend = backend_factory(["The cat ", "sat. [Page 1]"])
    service = ChatService(storage, AnswerGenerator(backend))
    session_id = await _session(storage)

    payloads = await _frames(service, session_id, "Where did the cat sit?")

    assert payloads[0] == {"type": "chunk", "content": "The cat "}
    assert payloads[1] == {"type": "chunk", "content": "sat. [Page 1]"}
    done = payloads[2]
    assert done["type"] == "complete"
    message = done["message"]
    assert message["sessionId"] == session_id
    assert message["role"] == "assistant"
    assert message["content"] == "The cat sat. [Page 1]"
    assert message["citations"] == [{"page": 1, "text": "[Page 1]"}]
    assert "createdAt" in message and "id" in message
    assert len(payloads) == 3

    stored = await storage.get_chat_messages(session_id)
    assert [(m.role, m.content) for m in stored] == [
        ("user", "Where did the cat sit?"),
        ("assistant", "The cat sat. [Page 1]"),
    ]


@pytest.mark.anyio
async def test_history_snapshot_excludes_current_question(storage: ChatStorage, backend_factory):
    backend = backend_factory(["answer"])
    service = ChatService(storage, AnswerGenerator(backend))
    session_id = await _session(storage)

    await _frames(service, session_id, "first question")
    await _frames(service, session_id, "second question")

    assert backend.calls[0]["history"] == []
    second_history = backend.calls[1]["history"]
    assert [(t.role, t.content) for t in second_history] == [
        ("user", "first question"),
        ("assistant", "answer"),
    ]


@pytest.mark.anyio
async def test_backend_error_is_framed_and_not_saved(storage: ChatStorage, backend_factory):
    backend = backend_factory(["partial"], fail_after=1, error="quota exceeded")
    service = ChatService(storage, AnswerGenerator(backend))
    session_id = await _session(storage)

    payloads = await _frames(service, session_id, "What happened?")

    assert payloads == [
        {"type": "chunk", "content": "partial"},
        {"type": "error", "error": "quota exceeded"},
    ]
    stored = await storage.get_chat_messages(session_id)
    assert [m.role for m in stored] == ["user"]


@pytest.mark.anyio
async def test_persistence_failure_reports_error(storage: ChatStorage, backend_factory):
    backend = backend_factory(["fine answer"])
    service = ChatService(storage, AnswerGenerator(backend))
    session_id = await _session(storage)
    turn = await service.prepare(session_id, "question here")

    async def broken_save(*args, **kwargs):
        raise RuntimeError("disk full")

    storage.save_message = broken_save  # type: ignore[method-assign]
    decoder = SSEDecoder()
    payloads = []
    async for frame in service.stream_frames(turn):
        payloads.extend(decoder.feed(frame))

    assert payloads == [
        {"type": "chunk", "content": "fine answer"},
        {"type": "error", "error": PERSIST_FAILED_MESSAGE},
    ]


@pytest.mark.anyio
async def test_unknown_session_rejected_before_generation(storage: ChatStorage, backend_factory):
    backend = backend_factory(["never"])
    service = ChatService(storage, AnswerGenerator(backend))
    with pytest.raises(SessionNotFoundError):
        await service.prepare("00000000-0000-0000-0000-000000000000", "hello there")
    assert backend.calls == []


@pytest.mark.anyio
async def test_missing_document_rejected(storage: ChatStorage, backend_factory):
    service = ChatService(storage, AnswerGenerator(backend_factory(["never"])))
    session_id = await _session(storage)
    session = await storage.get_chat_session(session_id)

    async def no_text(pdf_id: str):
        assert pdf_id == session.pdf_id
        return None

    storage.get_document_text = no_text  # type: ignore[method-assign]
    with pytest.raises(DocumentNotFoundError):
        await service.prepare(session_id, "hello there")


@pytest.mark.anyio
async def test_closing_frames_early_releases_backend(storage: ChatStorage, backend_factory):
    backend = backend_factory(["one ", "two ", "three"])
    service = ChatService(storage, AnswerGenerator(backend))
    session_id = await _session(storage)
    turn = await service.prepare(session_id, "count please")

    frames = service.stream_frames(turn)
    await frames.__anext__()
    await frames.aclose()

    assert backend.closed
    assert backend.yielded == 1
    assert [m.role for m in await storage.get_chat_messages(session_id)] == ["user"]
