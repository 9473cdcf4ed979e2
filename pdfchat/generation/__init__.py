"""
Answer generation module.

- Streaming answers over selected document context
- Stream events (chunk / complete / error)
- [Page N] citation extraction from model output
"""

from .citations import PageCitation, extract_citations
from .config import GenerationConfig
from .events import ChunkEvent, CompleteEvent, ErrorEvent, StreamEvent, is_terminal
from .generator import AnswerGenerator, GenerationRequest
from .prompts import SYSTEM_PREAMBLE

__all__ = [
    "AnswerGenerator",
    "ChunkEvent",
    "CompleteEvent",
    "ErrorEvent",
    "GenerationConfig",
    "GenerationRequest",
    "PageCitation",
    "StreamEvent",
    "SYSTEM_PREAMBLE",
    "extract_citations",
    "is_terminal",
]
