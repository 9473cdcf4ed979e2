"""
Context selection over a single document's text.

- Paragraph/sentence chunking with a size bound
- Keyword-count relevance selection of chunks
"""

from .chunker import DEFAULT_MAX_CHUNK_SIZE, chunk_text
from .config import RAGConfig
from .selector import ScoredChunk, build_context, extract_keywords, score_chunks, select_chunks

__all__ = [
    "DEFAULT_MAX_CHUNK_SIZE",
    "chunk_text",
    "RAGConfig",
    "ScoredChunk",
    "build_context",
    "extract_keywords",
    "score_chunks",
    "select_chunks",
]
