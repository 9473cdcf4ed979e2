"""
Shared fixtures: scripted generation backends and an in-memory database.
"""

from __future__ import annotations

from typing import AsyncIterator, List, Optional, Sequence

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pdfchat.db.models import Base
from pdfchat.db.storage import ChatStorage
from pdfchat.llm.base import ConversationTurn, GenerationError


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class ScriptedBackend:
    """Yields fixed fragments, optionally raising after a number of them."""

    def __init__(
        self,
        fragments: Sequence[str],
        fail_after: Optional[int] = None,
        error: str = "backend exploded",
    ):
        self.fragments = list(fragments)
        self.fail_after = fail_after
        self.error = error
        self.calls: List[dict] = []
        self.closed = False
        self.yielded = 0

    async def generate_stream(
        self,
        system_preamble: str,
        context: str,
        history: Sequence[ConversationTurn],
        question: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> AsyncIterator[str]:
        self.calls.append(
            {
                "system_preamble": system_preamble,
                "context": context,
                "history": list(history),
                "question": question,
                "max_tokens": max_tokens,
                "temperature": temperature,
            }
        )
        try:
            for i, fragment in enumerate(self.fragments):
                if self.fail_after is not None and i >= self.fail_after:
                    raise GenerationError(self.error)
                self.yielded += 1
                yield fragment
            if self.fail_after is not None and self.fail_after >= len(self.fragments):
                raise GenerationError(self.error)
        finally:
            self.closed = True


@pytest.fixture
async def storage() -> AsyncIterator[ChatStorage]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
    yield ChatStorage(factory)
    await engine.dispose()


@pytest.fixture
def backend_factory():
    """Build a ScriptedBackend: backend_factory(["a", "b"], fail_after=1)."""
    return ScriptedBackend
