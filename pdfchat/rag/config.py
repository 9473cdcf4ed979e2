"""
Configuration for context selection over document text.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RAGConfig:
    """Configuration for chunking and lexical chunk selection."""

    max_chunk_size: int = 4000
    top_k: int = 3
    fallback_chunks: int = 2
    separator: str = "\n\n---\n\n"
