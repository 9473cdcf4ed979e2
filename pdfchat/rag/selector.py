"""
Lexical relevance selection of document chunks for a question.

Scoring is a plain keyword count: cheap, explainable and good enough to keep
the prompt within budget for a single document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

logger = logging.getLogger(__name__)

MIN_KEYWORD_LENGTH = 4
DEFAULT_SEPARATOR = "\n\n---\n\n"


@dataclass(frozen=True)
class ScoredChunk:
    """A chunk with its position in the document and keyword score."""

    index: int
    text: str
    score: int


def extract_keywords(question: str) -> List[str]:
    """Lowercased whitespace tokens longer than three characters."""
    return [w for w in question.lower().split() if len(w) >= MIN_KEYWORD_LENGTH]


def score_chunks(chunks: Sequence[str], keywords: Sequence[str]) -> List[ScoredChunk]:
    """Score each chunk by total (case-insensitive) occurrences of the keywords."""
    scored: List[ScoredChunk] = []
    for i, chunk in enumerate(chunks):
        lowered = chunk.lower()
        score = sum(lowered.count(word) for word in keywords)
        scored.append(ScoredChunk(index=i, text=chunk, score=score))
    return scored


def select_chunks(
    chunks: Sequence[str],
    question: str,
    top_k: int = 3,
    fallback_count: int = 2,
) -> List[str]:
    """
    Pick the top_k highest-scoring chunks, returned in document order.

    Falls back to the first ``fallback_count`` chunks when the question has
    no keywords or no chunk mentions any of them.
    """
    if not chunks:
        return []
    keywords = extract_keywords(question)
    if keywords:
        scored = score_chunks(chunks, keywords)
        # sorted() is stable, so equal scores keep document order
        ranked = sorted(scored, key=lambda c: c.score, reverse=True)[: max(top_k, 0)]
        if any(c.score > 0 for c in ranked):
            ranked.sort(key=lambda c: c.index)
            logger.debug(
                "Selected chunks %s for keywords %s",
                [(c.index, c.score) for c in ranked],
                keywords,
            )
            return [c.text for c in ranked]
    logger.debug("No keyword matches; using first %s chunks", fallback_count)
    return list(chunks[: min(fallback_count, len(chunks))])


def build_context(
    chunks: Sequence[str],
    question: str,
    top_k: int = 3,
    fallback_count: int = 2,
    separator: str = DEFAULT_SEPARATOR,
) -> str:
    """Join the selected chunks with a visible separator; empty string for no chunks."""
    return separator.join(select_chunks(chunks, question, top_k=top_k, fallback_count=fallback_count))
