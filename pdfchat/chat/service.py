"""
Chat service: one question about one session's PDF, streamed as SSE frames.
"""

from __future__ import annotations

import logging
from contextlib import aclosing
from dataclasses import dataclass, field
from typing import AsyncIterator, List

from pdfchat.generation.sse import chunk_frame, complete_frame, error_frame
from pdfchat.db.storage import ChatStorage
from pdfchat.generation import AnswerGenerator, ChunkEvent, CompleteEvent, ErrorEvent
from pdfchat.llm.base import ROLE_ASSISTANT, ROLE_USER, ConversationTurn

from .schemas import ChatMessageOut

logger = logging.getLogger(__name__)

PERSIST_FAILED_MESSAGE = "The answer was generated but could not be saved. Please try again."


class SessionNotFoundError(LookupError):
    pass


class DocumentNotFoundError(LookupError):
    pass


@dataclass
class ChatTurn:
    """A validated question with the document and history snapshot it is answered from."""

    session_id: str
    question: str
    document_text: str
    history: List[ConversationTurn] = field(default_factory=list)


class ChatService:
    """Validate, answer, persist and frame chat questions."""

    def __init__(self, storage: ChatStorage, generator: AnswerGenerator):
        self.storage = storage
        self.generator = generator

    async def prepare(self, session_id: str, question: str) -> ChatTurn:
        """
        Load the session's document and history, then store the user's question.

        Raises SessionNotFoundError / DocumentNotFoundError before anything is generated.
        """
        session = await self.storage.get_chat_session(session_id)
        if session is None:
            raise SessionNotFoundError("Session not found")
        document_text = await self.storage.get_document_text(session.pdf_id)
        if document_text is None:
            raise DocumentNotFoundError("PDF not found")

        history = await self.storage.get_history(session_id)
        await self.storage.save_message(session_id, ROLE_USER, question)
        logger.info(
            "Answering session %s: %s history turns, %s chars of document text",
            session_id,
            len(history),
            len(document_text),
        )
        return ChatTurn(
            session_id=session_id,
            question=question,
            document_text=document_text,
            history=history,
        )

    async def stream_frames(self, turn: ChatTurn) -> AsyncIterator[str]:
        """
        Yield SSE frames for the answer; the last frame is complete or error.

        The assistant message is saved once, after the full answer is known.
        Errors from the model are not saved.
        """
        events = self.generator.stream(turn.question, turn.document_text, turn.history)
        async with aclosing(events):
            async for event in events:
                if isinstance(event, ChunkEvent):
                    yield chunk_frame(event.content)
                elif isinstance(event, ErrorEvent):
                    yield error_frame(event.message)
                    return
                elif isinstance(event, CompleteEvent):
                    try:
                        stored = await self.storage.save_message(
                            turn.session_id,
                            ROLE_ASSISTANT,
                            event.answer,
                            event.citations,
                        )
                    except Exception:
                        logger.exception("Failed to save answer for session %s", turn.session_id)
                        yield error_frame(PERSIST_FAILED_MESSAGE)
                        return
                    yield complete_frame(ChatMessageOut.model_validate(stored).to_wire())
                    try:
                        await self.storage.touch_session(turn.session_id)
                    except Exception:
                        logger.exception("Failed to update timestamp of session %s", turn.session_id)
                    return
