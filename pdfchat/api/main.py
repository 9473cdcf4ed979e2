"""
FastAPI application for chatting with uploaded PDFs.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pdfchat.config import Settings, configure_logging
from pdfchat.documents.processor import ensure_upload_dir

from .deps import build_services
from .routes import router

settings = Settings.from_env()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build storage and the generation backend on startup; close the client on shutdown."""
    configure_logging(settings.log_level)
    ensure_upload_dir(settings.upload_dir)
    storage, client, generator = build_services()
    app.state.settings = settings
    app.state.storage = storage
    app.state.generator = generator
    yield
    if client is not None:
        await client.close()


app = FastAPI(
    title="pdfchat API",
    description="Upload a PDF and ask questions about it with streamed, page-cited answers",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(router)
