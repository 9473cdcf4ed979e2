"""
Generation backend interface consumed by the answer pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterator, Optional, Protocol, Sequence

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"


class GenerationError(Exception):
    """The generation backend failed to start or finish a completion."""


@dataclass(frozen=True)
class ConversationTurn:
    """One prior message in the chat, as sent to the model."""

    role: str
    content: str


class GenerationBackend(Protocol):
    """Anything that can stream a completion for a structured prompt."""

    def generate_stream(
        self,
        system_preamble: str,
        context: str,
        history: Sequence[ConversationTurn],
        question: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> AsyncIterator[str]:
        """
        Stream answer text fragments.

        Args:
            system_preamble: Fixed answering instructions
            context: Selected document excerpts
            history: Prior turns, oldest first
            question: The new user question
            max_tokens: Completion length limit; None uses the backend default
            temperature: Sampling temperature; None uses the backend default

        Returns:
            Async iterator of text fragments; raises GenerationError on failure
        """
        ...
