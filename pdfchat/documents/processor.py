"""
PDF text extraction and upload-directory helpers.

Text is extracted page by page with PyMuPDF. The stored document text marks
each page with a ``[Page N]`` header so the model can cite real pages.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict

import fitz

logger = logging.getLogger(__name__)


class PDFProcessingError(Exception):
    """The uploaded file could not be read as a PDF."""


@dataclass
class PDFMetadata:
    """Extracted text of one PDF."""

    page_count: int
    text_content: str
    text_by_page: Dict[int, str] = field(default_factory=dict)


def _page_block(page_number: int, text: str) -> str:
    return f"[Page {page_number}]\n{text.strip()}"


def process_pdf(path: Path) -> PDFMetadata:
    """
    Extract per-page text from a PDF file.

    Args:
        path: Path to the PDF on disk.

    Returns:
        PDFMetadata with 1-based page numbers.
    """
    text_by_page: Dict[int, str] = {}
    try:
        with fitz.open(str(path)) as doc:
            page_count = doc.page_count
            for i, page in enumerate(doc, 1):
                text_by_page[i] = page.get_text("text") or ""
    except Exception as e:
        logger.error("PDF processing error for %s: %s", path, e)
        raise PDFProcessingError("Failed to process PDF file") from e

    text_content = "\n\n".join(_page_block(n, t) for n, t in text_by_page.items())
    return PDFMetadata(page_count=page_count, text_content=text_content, text_by_page=text_by_page)


def ensure_upload_dir(upload_dir: Path) -> Path:
    upload_dir.mkdir(parents=True, exist_ok=True)
    return upload_dir


def get_pdf_path(upload_dir: Path, filename: str) -> Path:
    """Resolve a stored filename inside the upload directory, rejecting traversal."""
    root = upload_dir.resolve()
    path = (root / filename).resolve()
    if path.parent != root:
        raise ValueError(f"Invalid stored filename: {filename!r}")
    return path
