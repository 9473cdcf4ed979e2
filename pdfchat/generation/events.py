"""
Events produced while streaming an answer.

A stream is zero or more ChunkEvents followed by exactly one CompleteEvent
or ErrorEvent. These are in-process values; the wire frames are built by
``pdfchat.generation.sse``, where the complete frame carries the stored
message rather than the bare answer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Union

from .citations import PageCitation

EVENT_CHUNK = "chunk"
EVENT_COMPLETE = "complete"
EVENT_ERROR = "error"


@dataclass(frozen=True)
class ChunkEvent:
    """One text fragment of the answer, in arrival order."""

    content: str
    type: str = field(default=EVENT_CHUNK, init=False)


@dataclass(frozen=True)
class CompleteEvent:
    """Full answer text and the citations found in it."""

    answer: str
    citations: List[PageCitation] = field(default_factory=list)
    type: str = field(default=EVENT_COMPLETE, init=False)


@dataclass(frozen=True)
class ErrorEvent:
    """Generation failed; no CompleteEvent follows."""

    message: str
    type: str = field(default=EVENT_ERROR, init=False)


StreamEvent = Union[ChunkEvent, CompleteEvent, ErrorEvent]


def is_terminal(event: StreamEvent) -> bool:
    return event.type in (EVENT_COMPLETE, EVENT_ERROR)
