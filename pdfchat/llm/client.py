"""
Streaming LLM client for OpenAI-compatible chat APIs (Gemini, OpenAI, DeepSeek, etc.).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import AsyncIterator, List, Optional, Sequence

from dotenv import load_dotenv
from openai import AsyncOpenAI

from .base import ROLE_ASSISTANT, ROLE_USER, ConversationTurn, GenerationError

# Load .env file if it exists
project_root = Path(__file__).resolve().parents[2]
env_file = project_root / ".env"
if env_file.exists():
    load_dotenv(env_file)

# Gemini exposes an OpenAI-compatible endpoint; any compatible provider works.
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_TIMEOUT_S = 60.0

SYSTEM_TEMPLATE = """{preamble}

PDF CONTENT:
{context}

When you cite information, use this format: [Page X] where X is the actual page number."""

logger = logging.getLogger(__name__)


def _resolve_client_params(
    model_name: Optional[str] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> tuple[str, str, str, float]:
    """Resolve model, api_key, base_url, timeout from args or env."""
    key = api_key or os.getenv("LLM_API_KEY") or os.getenv("GEMINI_API_KEY") or ""
    base = base_url or os.getenv("LLM_BASE_URL") or DEFAULT_BASE_URL
    model = model_name or os.getenv("LLM_MODEL") or DEFAULT_MODEL
    if timeout is None:
        timeout = float(os.getenv("LLM_TIMEOUT_S", DEFAULT_TIMEOUT_S))
    return model, key, base, timeout


def build_messages(
    system_preamble: str,
    context: str,
    history: Sequence[ConversationTurn],
    question: str,
) -> List[dict]:
    """System prompt with the document excerpts, prior turns, then the question."""
    messages: List[dict] = [
        {
            "role": "system",
            "content": SYSTEM_TEMPLATE.format(preamble=system_preamble, context=context),
        }
    ]
    for turn in history:
        role = ROLE_USER if turn.role == ROLE_USER else ROLE_ASSISTANT
        messages.append({"role": role, "content": turn.content})
    messages.append({"role": ROLE_USER, "content": question})
    return messages


class OpenAICompatibleClient:
    """Async chat-completions client implementing GenerationBackend."""

    def __init__(
        self,
        model_name: Optional[str] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ):
        self.model_name, key, self.base_url, self.timeout = _resolve_client_params(
            model_name=model_name, api_key=api_key, base_url=base_url, timeout=timeout
        )
        if not key:
            raise ValueError("API key required. Set LLM_API_KEY (or GEMINI_API_KEY).")
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.client = AsyncOpenAI(base_url=self.base_url, api_key=key, timeout=self.timeout)

    async def generate_stream(
        self,
        system_preamble: str,
        context: str,
        history: Sequence[ConversationTurn],
        question: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> AsyncIterator[str]:
        """Stream text fragments; the HTTP stream is closed if the caller stops early."""
        messages = build_messages(system_preamble, context, history, question)
        try:
            response = await self.client.chat.completions.create(
                model=self.model_name,
                messages=messages,
                max_tokens=self.max_tokens if max_tokens is None else max_tokens,
                temperature=self.temperature if temperature is None else temperature,
                stream=True,
            )
        except Exception as e:
            logger.error("Error starting stream from %s: %s", self.base_url, e)
            raise GenerationError(f"Failed to generate streaming response: {e}") from e

        try:
            async for chunk in response:
                if chunk.choices and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content
        except Exception as e:
            logger.error("Error streaming from %s: %s", self.base_url, e)
            raise GenerationError(f"Failed to generate streaming response: {e}") from e
        finally:
            await response.close()

    async def close(self) -> None:
        await self.client.close()


def create_client(
    model_name: Optional[str] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> OpenAICompatibleClient:
    """Create an OpenAI-compatible streaming client (Gemini by default)."""
    return OpenAICompatibleClient(
        model_name=model_name,
        api_key=api_key,
        base_url=base_url,
        timeout=timeout,
    )
