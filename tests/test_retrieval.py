"""
Tests for chunking and lexical chunk selection.
"""

from __future__ import annotations

import re

import pytest

from pdfchat.rag import (
    RAGConfig,
    build_context,
    chunk_text,
    extract_keywords,
    score_chunks,
    select_chunks,
)


def _squash(text: str) -> str:
    return re.sub(r"\s+", "", text)


def test_short_text_is_single_chunk():
    """Text under the limit comes back as one trimmed chunk."""
    assert chunk_text("A" * 100, 8000) == ["A" * 100]
    assert chunk_text("  hello world \n", 8000) == ["hello world"]


def test_empty_text_yields_no_chunks():
    assert chunk_text("", 100) == []
    assert chunk_text("\n\n   \n\n", 100) == []


@pytest.mark.parametrize("size", [0, -5])
def test_non_positive_chunk_size_rejected(size: int):
    with pytest.raises(ValueError):
        chunk_text("some text", size)


def test_paragraphs_are_packed_greedily():
    """Paragraphs are joined until the next one would overflow."""
    text = "aaaa\n\nbbbb\n\ncccc"
    # "aaaa\n\nbbbb" is 10 chars, adding "\n\ncccc" would be 16
    assert chunk_text(text, 12) == ["aaaa\n\nbbbb", "cccc"]
    assert chunk_text(text, 16) == [text]


def test_three_or_more_newlines_split_paragraphs():
    assert chunk_text("first\n\n\n\nsecond", 6) == ["first", "second"]


def test_long_paragraph_split_on_sentences():
    paragraph = "One two three. Four five six! Seven eight nine? Ten."
    chunks = chunk_text(paragraph, 20)
    assert all(len(c) <= 20 for c in chunks)
    assert chunks[0] == "One two three."
    assert _squash("".join(chunks)) == _squash(paragraph)


def test_unterminated_tail_is_kept():
    paragraph = "First sentence here. and a trailing fragment without stop"
    chunks = chunk_text(paragraph, 25)
    assert _squash("".join(chunks)) == _squash(paragraph)
    assert all(c for c in chunks)


def test_sentence_without_boundaries_falls_back_to_words():
    words = " ".join(f"word{i}" for i in range(50))
    chunks = chunk_text(words, 30)
    assert len(chunks) > 1
    assert all(len(c) <= 30 for c in chunks)
    assert " ".join(chunks).split() == words.split()


def test_indivisible_unit_stands_alone():
    huge = "x" * 50
    chunks = chunk_text(f"small words {huge} more words", 20)
    assert huge in chunks
    assert all(len(c) <= 20 for c in chunks if c != huge)


def test_chunks_cover_whole_document():
    """No text is lost and no chunk is over the limit except indivisible ones."""
    paragraphs = [
        "Intro paragraph about the report.",
        "Methods. " * 40,
        "Results were significant! Really? Yes.",
        "Z" * 120,
        "Conclusion.",
    ]
    text = "\n\n".join(paragraphs)
    chunks = chunk_text(text, 100)
    assert _squash("".join(chunks)) == _squash(text)
    for c in chunks:
        assert c == c.strip() and c
        assert len(c) <= 100 or " " not in c


def test_extract_keywords_keeps_long_words_lowercased():
    assert extract_keywords("What IS the Revenue of the company in 2023?") == [
        "what",
        "revenue",
        "company",
        "2023?",
    ]
    assert extract_keywords("is it ok") == []


def test_score_counts_case_insensitive_occurrences():
    scored = score_chunks(["Revenue grew. REVENUE!", "nothing here"], ["revenue"])
    assert [s.score for s in scored] == [2, 0]
    assert [s.index for s in scored] == [0, 1]


def test_keywords_with_regex_characters_are_literal():
    scored = score_chunks(["price (usd)", "price usd"], ["(usd)"])
    assert [s.score for s in scored] == [1, 0]


def test_select_returns_top_k_in_document_order():
    chunks = [
        "intro",
        "deadlock deadlock deadlock",
        "unrelated",
        "deadlock once",
        "deadlock deadlock",
    ]
    selected = select_chunks(chunks, "explain deadlock", top_k=3)
    assert selected == [chunks[1], chunks[3], chunks[4]]


def test_ties_keep_original_order():
    chunks = ["alpha match", "beta match", "gamma match", "delta match"]
    assert select_chunks(chunks, "match", top_k=2) == ["alpha match", "beta match"]


def test_short_word_question_falls_back_to_first_two():
    chunks = ["zero", "one", "two", "three"]
    assert select_chunks(chunks, "is it ok?", top_k=3) == ["zero", "one"]
    assert select_chunks(["only"], "why", top_k=3) == ["only"]


def test_no_matches_falls_back_to_first_two():
    chunks = ["zero", "one", "two"]
    assert select_chunks(chunks, "photosynthesis process", top_k=3) == ["zero", "one"]


def test_build_context_joins_with_separator():
    chunks = ["first about cats", "second about dogs", "third about cats"]
    ctx = build_context(chunks, "tell me about cats", top_k=3)
    assert ctx == "first about cats\n\n---\n\nsecond about dogs\n\n---\n\nthird about cats"


def test_build_context_empty_chunks():
    assert build_context([], "anything at all") == ""


def test_rag_config_defaults():
    cfg = RAGConfig()
    assert cfg.max_chunk_size == 4000
    assert cfg.top_k == 3
    assert cfg.fallback_chunks == 2
