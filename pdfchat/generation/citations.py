"""
Extract [Page N] references from generated text.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Dict, List

PAGE_CITATION_RE = re.compile(r"\[Page (\d+)\]")


@dataclass(frozen=True)
class PageCitation:
    """A page referenced by an answer, with the literal marker that cited it."""

    page: int
    text: str

    def to_dict(self) -> dict:
        return asdict(self)


def extract_citations(text: str) -> List[PageCitation]:
    """
    Parse [Page N] markers in text.

    The first marker seen for a page wins; the result is sorted by page
    number. Page 0 is not a valid page and is skipped.
    """
    by_page: Dict[int, PageCitation] = {}
    for m in PAGE_CITATION_RE.finditer(text):
        page = int(m.group(1))
        if page < 1 or page in by_page:
            continue
        by_page[page] = PageCitation(page=page, text=m.group(0))
    return [by_page[p] for p in sorted(by_page)]
