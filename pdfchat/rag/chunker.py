"""
Paragraph-first chunker for extracted PDF text.

Paragraphs (blank-line separated) are packed greedily into chunks of at most
``max_chunk_size`` characters. Paragraphs that are too long on their own are
broken into sentences, and sentences that are still too long into words.
A single word longer than the limit becomes its own chunk.
"""

from __future__ import annotations

import re
from typing import Iterable, List

DEFAULT_MAX_CHUNK_SIZE = 8000

PARAGRAPH_SPLIT_RE = re.compile(r"\n{2,}")
# Terminated sentences, then whatever trails the last terminator.
SENTENCE_RE = re.compile(r"[^.!?]*[.!?]+|[^.!?]+$")
# Each word keeps its leading whitespace so pieces concatenate back to the source.
WORD_RE = re.compile(r"\s*\S+")


def _split_oversized(paragraph: str, max_chunk_size: int) -> Iterable[str]:
    """Yield sentence-like units, falling back to words for long sentences."""
    for sentence in SENTENCE_RE.findall(paragraph):
        if len(sentence) <= max_chunk_size:
            yield sentence
        else:
            yield from WORD_RE.findall(sentence)


def chunk_text(text: str, max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE) -> List[str]:
    """
    Split document text into bounded chunks on paragraph/sentence boundaries.

    Args:
        text: Full document text.
        max_chunk_size: Maximum characters per chunk (must be positive).

    Returns:
        Non-empty, stripped chunks in document order.
    """
    if max_chunk_size <= 0:
        raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")

    chunks: List[str] = []
    current = ""

    def flush() -> None:
        nonlocal current
        piece = current.strip()
        if piece:
            chunks.append(piece)
        current = ""

    for paragraph in PARAGRAPH_SPLIT_RE.split(text):
        if not paragraph.strip():
            continue
        candidate = f"{current}\n\n{paragraph}" if current else paragraph
        if len(candidate) <= max_chunk_size:
            current = candidate
            continue

        flush()
        if len(paragraph) <= max_chunk_size:
            current = paragraph
            continue

        for unit in _split_oversized(paragraph, max_chunk_size):
            if current and len(current) + len(unit) > max_chunk_size:
                flush()
                unit = unit.lstrip()
            current += unit

    flush()
    return chunks
