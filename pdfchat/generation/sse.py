"""
Server-sent event framing for streamed answers.

Each frame is ``data: <single-line JSON>`` followed by a blank line. Three
payload shapes are valid on the channel:

    {"type":"chunk","content":"..."}
    {"type":"complete","message":{...stored message...}}
    {"type":"error","error":"..."}
"""

from __future__ import annotations

import codecs
import json
import logging
from typing import Any, AsyncIterable, AsyncIterator, Dict, List, Optional, Union

from .citations import PageCitation
from .events import (
    EVENT_CHUNK,
    EVENT_COMPLETE,
    EVENT_ERROR,
    ChunkEvent,
    CompleteEvent,
    ErrorEvent,
    StreamEvent,
)

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
FRAME_END = "\n\n"
VALID_TYPES = frozenset({EVENT_CHUNK, EVENT_COMPLETE, EVENT_ERROR})


def format_sse(payload: Dict[str, Any]) -> str:
    """Encode one payload as a self-delimiting frame."""
    data = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return f"{DATA_PREFIX}{data}{FRAME_END}"


def chunk_frame(content: str) -> str:
    return format_sse({"type": EVENT_CHUNK, "content": content})


def complete_frame(message: Dict[str, Any]) -> str:
    return format_sse({"type": EVENT_COMPLETE, "message": message})


def error_frame(message: str) -> str:
    return format_sse({"type": EVENT_ERROR, "error": message})


def _parse_frame(frame: str) -> Optional[Dict[str, Any]]:
    """Return the JSON payload of one frame, or None if it is not a valid message."""
    for line in frame.split("\n"):
        if not line.startswith(DATA_PREFIX):
            continue
        try:
            payload = json.loads(line[len(DATA_PREFIX) :])
        except json.JSONDecodeError:
            logger.warning("Failed to parse SSE data: %r", line)
            continue
        if not isinstance(payload, dict) or payload.get("type") not in VALID_TYPES:
            logger.warning("Ignoring unknown SSE message: %r", line)
            continue
        return payload
    return None


class SSEDecoder:
    """
    Incremental frame decoder for the receiving side.

    Feed raw reads in arrival order; frames split across reads are buffered
    until their terminating blank line arrives.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        self._buffer = ""

    def feed(self, data: Union[bytes, str]) -> List[Dict[str, Any]]:
        if isinstance(data, bytes):
            data = self._decoder.decode(data)
        self._buffer = (self._buffer + data).replace("\r\n", "\n")
        *frames, self._buffer = self._buffer.split(FRAME_END)
        payloads = []
        for frame in frames:
            payload = _parse_frame(frame)
            if payload is not None:
                payloads.append(payload)
        return payloads

    def close(self) -> List[Dict[str, Any]]:
        """Flush trailing unterminated data; only a fully valid message is kept."""
        rest = (self._buffer + self._decoder.decode(b"", final=True)).strip()
        self._buffer = ""
        if not rest:
            return []
        payload = _parse_frame(rest)
        if payload is None:
            logger.warning("Discarding incomplete trailing SSE data (%s chars)", len(rest))
            return []
        return [payload]


async def iter_sse_payloads(chunks: AsyncIterable[bytes]) -> AsyncIterator[Dict[str, Any]]:
    """Decode an async byte stream into payload dicts, in order."""
    decoder = SSEDecoder()
    async for chunk in chunks:
        for payload in decoder.feed(chunk):
            yield payload
    for payload in decoder.close():
        yield payload


def payload_to_event(payload: Dict[str, Any]) -> StreamEvent:
    """Map a wire payload back to the stream event it carries."""
    kind = payload.get("type")
    if kind == EVENT_CHUNK:
        return ChunkEvent(content=payload.get("content", ""))
    if kind == EVENT_COMPLETE:
        message = payload.get("message") or {}
        citations = [
            PageCitation(page=int(c["page"]), text=c["text"])
            for c in (message.get("citations") or [])
        ]
        return CompleteEvent(answer=message.get("content", ""), citations=citations)
    if kind == EVENT_ERROR:
        return ErrorEvent(message=payload.get("error", ""))
    raise ValueError(f"Unknown stream event type: {kind!r}")
