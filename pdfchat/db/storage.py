"""
Async repository for PDFs, chat sessions and chat messages.
"""

from __future__ import annotations

import datetime as dt
from typing import List, Optional, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pdfchat.generation.citations import PageCitation
from pdfchat.llm.base import ConversationTurn

from .models import ChatMessage, ChatSession, Pdf


class ChatStorage:
    """Persistence operations used by the API and chat service."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    # PDFs

    async def create_pdf(
        self,
        filename: str,
        original_name: str,
        file_size: int,
        page_count: int,
        text_content: Optional[str],
    ) -> Pdf:
        pdf = Pdf(
            filename=filename,
            original_name=original_name,
            file_size=file_size,
            page_count=page_count,
            text_content=text_content,
        )
        async with self.session_factory() as db:
            db.add(pdf)
            await db.commit()
            await db.refresh(pdf)
        return pdf

    async def get_pdf(self, pdf_id: str) -> Optional[Pdf]:
        async with self.session_factory() as db:
            return await db.get(Pdf, pdf_id)

    async def get_document_text(self, pdf_id: str) -> Optional[str]:
        """Extracted text of a PDF; None if the PDF does not exist."""
        pdf = await self.get_pdf(pdf_id)
        if pdf is None:
            return None
        return pdf.text_content or ""

    async def delete_pdf(self, pdf_id: str) -> None:
        async with self.session_factory() as db:
            await db.execute(delete(Pdf).where(Pdf.id == pdf_id))
            await db.commit()

    # Sessions

    async def create_chat_session(self, pdf_id: str) -> ChatSession:
        session = ChatSession(pdf_id=pdf_id)
        async with self.session_factory() as db:
            db.add(session)
            await db.commit()
            await db.refresh(session)
        return session

    async def get_chat_session(self, session_id: str) -> Optional[ChatSession]:
        async with self.session_factory() as db:
            return await db.get(ChatSession, session_id)

    async def touch_session(self, session_id: str) -> None:
        async with self.session_factory() as db:
            await db.execute(
                update(ChatSession)
                .where(ChatSession.id == session_id)
                .values(updated_at=dt.datetime.now(dt.timezone.utc))
            )
            await db.commit()

    # Messages

    async def create_chat_message(
        self,
        session_id: str,
        role: str,
        content: str,
        citations: Optional[list] = None,
    ) -> ChatMessage:
        message = ChatMessage(
            session_id=session_id,
            role=role,
            content=content,
            citations=citations,
        )
        async with self.session_factory() as db:
            db.add(message)
            await db.commit()
            await db.refresh(message)
        return message

    async def save_message(
        self,
        session_id: str,
        role: str,
        content: str,
        citations: Optional[Sequence[PageCitation]] = None,
    ) -> ChatMessage:
        """Store a message; an empty citation list is stored as NULL."""
        payload = [c.to_dict() for c in citations] if citations else None
        return await self.create_chat_message(session_id, role, content, payload)

    async def get_chat_messages(self, session_id: str) -> List[ChatMessage]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(ChatMessage)
                .where(ChatMessage.session_id == session_id)
                .order_by(ChatMessage.created_at)
            )
            return list(result.scalars().all())

    async def get_history(self, session_id: str) -> List[ConversationTurn]:
        messages = await self.get_chat_messages(session_id)
        return [ConversationTurn(role=m.role, content=m.content) for m in messages]

    async def clear_chat_messages(self, session_id: str) -> None:
        async with self.session_factory() as db:
            await db.execute(delete(ChatMessage).where(ChatMessage.session_id == session_id))
            await db.commit()
