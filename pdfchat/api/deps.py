"""
Build shared collaborators for the API (used in lifespan) and expose them as dependencies.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from fastapi import Depends, HTTPException, Request, status

from pdfchat.chat.service import ChatService
from pdfchat.config import Settings
from pdfchat.db.session import AsyncSessionLocal
from pdfchat.db.storage import ChatStorage
from pdfchat.generation import AnswerGenerator, GenerationConfig
from pdfchat.llm import OpenAICompatibleClient, create_client
from pdfchat.rag import RAGConfig

logger = logging.getLogger(__name__)


def build_services() -> Tuple[ChatStorage, Optional[OpenAICompatibleClient], Optional[AnswerGenerator]]:
    """
    Create storage, LLM client and answer generator.

    The client and generator are None when no API key is configured, so the
    upload and history routes still work and chat returns 503.
    """
    storage = ChatStorage(AsyncSessionLocal)
    try:
        client = create_client()
    except ValueError as e:
        logger.warning("Generation backend not configured: %s", e)
        return storage, None, None
    generator = AnswerGenerator(client, rag_config=RAGConfig(), config=GenerationConfig())
    return storage, client, generator


def get_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        settings = Settings.from_env()
        request.app.state.settings = settings
    return settings


def get_storage(request: Request) -> ChatStorage:
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service unavailable: storage not initialized.",
        )
    return storage


def get_generator(request: Request) -> Optional[AnswerGenerator]:
    return getattr(request.app.state, "generator", None)


def get_chat_service(
    storage: ChatStorage = Depends(get_storage),
    generator: Optional[AnswerGenerator] = Depends(get_generator),
) -> ChatService:
    if generator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service unavailable: generation backend not configured.",
        )
    return ChatService(storage, generator)
