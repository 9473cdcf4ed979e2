"""
Answer generator: selects document context, streams the LLM answer, extracts citations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, List, Optional, Sequence

from pdfchat.llm.base import ConversationTurn, GenerationBackend
from pdfchat.rag.chunker import chunk_text
from pdfchat.rag.config import RAGConfig
from pdfchat.rag.selector import build_context

from .citations import extract_citations
from .config import GenerationConfig
from .events import ChunkEvent, CompleteEvent, ErrorEvent, StreamEvent
from .prompts import SYSTEM_PREAMBLE

logger = logging.getLogger(__name__)

EMPTY_ANSWER_MESSAGE = "The model returned an empty response. Please try again."


@dataclass
class GenerationRequest:
    """Everything the backend needs for one answer."""

    system_preamble: str
    context: str
    question: str
    history: List[ConversationTurn] = field(default_factory=list)


class AnswerGenerator:
    """Stream answers about one document's text using a generation backend."""

    def __init__(
        self,
        backend: GenerationBackend,
        rag_config: Optional[RAGConfig] = None,
        config: Optional[GenerationConfig] = None,
        system_preamble: str = SYSTEM_PREAMBLE,
    ):
        self.backend = backend
        self.rag_config = rag_config or RAGConfig()
        self.config = config or GenerationConfig()
        self.system_preamble = system_preamble

    def build_request(
        self,
        question: str,
        document_text: str,
        history: Optional[Sequence[ConversationTurn]] = None,
    ) -> GenerationRequest:
        """Chunk the document, select relevant chunks and assemble the prompt parts."""
        cfg = self.rag_config
        chunks = chunk_text(document_text or "", cfg.max_chunk_size)
        context = build_context(
            chunks,
            question,
            top_k=cfg.top_k,
            fallback_count=cfg.fallback_chunks,
            separator=cfg.separator,
        )
        logger.debug(
            "Document split into %s chunks; context length %s",
            len(chunks),
            len(context),
        )
        return GenerationRequest(
            system_preamble=self.system_preamble,
            context=context,
            question=question,
            history=list(history or []),
        )

    async def stream(
        self,
        question: str,
        document_text: str,
        history: Optional[Sequence[ConversationTurn]] = None,
    ) -> AsyncIterator[StreamEvent]:
        """
        Yield ChunkEvents as fragments arrive, then one CompleteEvent or ErrorEvent.

        Closing this iterator early closes the backend stream as well.
        """
        request = self.build_request(question, document_text, history)
        fragments: Optional[AsyncIterator[str]] = None
        parts: List[str] = []
        try:
            try:
                fragments = self.backend.generate_stream(
                    request.system_preamble,
                    request.context,
                    request.history,
                    request.question,
                    max_tokens=self.config.max_tokens,
                    temperature=self.config.temperature,
                )
                async for fragment in fragments:
                    if not fragment:
                        continue
                    parts.append(fragment)
                    yield ChunkEvent(content=fragment)
            except Exception as e:
                logger.error("Generation stream failed after %s fragments: %s", len(parts), e)
                yield ErrorEvent(message=str(e) or e.__class__.__name__)
                return
        finally:
            aclose = getattr(fragments, "aclose", None)
            if aclose is not None:
                await aclose()

        answer = "".join(parts)
        if not answer.strip():
            yield ErrorEvent(message=EMPTY_ANSWER_MESSAGE)
            return
        yield CompleteEvent(answer=answer, citations=extract_citations(answer))
