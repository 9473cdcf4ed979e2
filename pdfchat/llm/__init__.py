"""
LLM client module: streaming chat completions over OpenAI-compatible APIs.
"""

from .base import ConversationTurn, GenerationBackend, GenerationError
from .client import OpenAICompatibleClient, build_messages, create_client

__all__ = [
    "ConversationTurn",
    "GenerationBackend",
    "GenerationError",
    "OpenAICompatibleClient",
    "build_messages",
    "create_client",
]
