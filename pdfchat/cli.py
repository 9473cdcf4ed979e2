"""
Terminal client for the PDF chat API.

Recommended usage (run as a module so package imports work):

    uv run python -m pdfchat.cli upload paper.pdf
    uv run python -m pdfchat.cli ask <session-id> "what is the main result?"
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Callable, List, Optional

import httpx

from pdfchat.generation.sse import SSEDecoder, payload_to_event
from pdfchat.generation import ChunkEvent, CompleteEvent, ErrorEvent, StreamEvent

DEFAULT_URL = os.getenv("PDFCHAT_URL", "http://localhost:8000")


class ChatStreamError(RuntimeError):
    """The server reported an error event, or the stream ended without an answer."""


def stream_answer(
    client: httpx.Client,
    session_id: str,
    question: str,
    on_chunk: Optional[Callable[[str], None]] = None,
) -> CompleteEvent:
    """
    POST a question and consume the SSE stream.

    Calls on_chunk for every streamed fragment and returns the final answer.
    """
    decoder = SSEDecoder()
    with client.stream(
        "POST",
        "/api/chat",
        json={"sessionId": session_id, "question": question},
    ) as response:
        if response.status_code != 200:
            response.read()
            raise ChatStreamError(f"HTTP {response.status_code}: {response.text}")
        for raw in response.iter_bytes():
            for payload in decoder.feed(raw):
                done = _handle(payload_to_event(payload), on_chunk)
                if done is not None:
                    return done
        for payload in decoder.close():
            done = _handle(payload_to_event(payload), on_chunk)
            if done is not None:
                return done
    raise ChatStreamError("Stream ended without a complete message")


def _handle(event: StreamEvent, on_chunk: Optional[Callable[[str], None]]) -> Optional[CompleteEvent]:
    if isinstance(event, ChunkEvent):
        if on_chunk is not None:
            on_chunk(event.content)
        return None
    if isinstance(event, ErrorEvent):
        raise ChatStreamError(event.message)
    return event


def _cmd_upload(client: httpx.Client, args: argparse.Namespace) -> int:
    path = Path(args.file)
    with path.open("rb") as f:
        r = client.post("/api/upload", files={"pdf": (path.name, f, "application/pdf")})
    if r.status_code != 200:
        print(f"Upload failed ({r.status_code}): {r.text}", file=sys.stderr)
        return 1
    data = r.json()
    print(f"pdf:     {data['pdf']['id']} ({data['pdf']['pageCount']} pages)")
    print(f"session: {data['session']['id']}")
    return 0


def _cmd_ask(client: httpx.Client, args: argparse.Namespace) -> int:
    def echo(text: str) -> None:
        sys.stdout.write(text)
        sys.stdout.flush()

    try:
        done = stream_answer(client, args.session_id, args.question, on_chunk=echo)
    except ChatStreamError as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    print()
    if done.citations:
        print("Cited pages: " + ", ".join(str(c.page) for c in done.citations))
    return 0


def _cmd_history(client: httpx.Client, args: argparse.Namespace) -> int:
    r = client.get(f"/api/chat/{args.session_id}/messages")
    r.raise_for_status()
    for m in r.json():
        print(f"[{m['role']}] {m['content']}\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pdfchat", description="Chat with an uploaded PDF.")
    parser.add_argument("--base-url", default=DEFAULT_URL, help="API base URL (env PDFCHAT_URL)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_upload = sub.add_parser("upload", help="Upload a PDF and start a chat session")
    p_upload.add_argument("file")
    p_upload.set_defaults(func=_cmd_upload)

    p_ask = sub.add_parser("ask", help="Ask a question and stream the answer")
    p_ask.add_argument("session_id")
    p_ask.add_argument("question")
    p_ask.set_defaults(func=_cmd_ask)

    p_history = sub.add_parser("history", help="Print the messages of a session")
    p_history.add_argument("session_id")
    p_history.set_defaults(func=_cmd_history)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    with httpx.Client(base_url=args.base_url, timeout=None) as client:
        return args.func(client, args)


if __name__ == "__main__":
    sys.exit(main())
