"""Lexical scoring of candidate chunks."""

from __future__ import annotations

from typing import Sequence

import orjson

from ghostwriter.ingest.keywords import query_tokens
from ghostwriter.models.entities import ScoredChunk, SearchableChunk

KEYWORD_HIT = 3
TEXT_HIT = 1
PHRASE_BONUS = 5
PHRASE_CHARS = 50


def keyword_search(query: str, chunks: Sequence[SearchableChunk], top_k: int = 4) -> list[ScoredChunk]:
    """Rank chunks by raw lexical overlap with the query.

    A query token earns 3 points when it is one of the chunk's keywords and
    1 more when it occurs anywhere in the chunk text, so a keyword hit counts
    twice. A chunk containing the first 50 characters of the query gets 5
    more. Scores are raw integers; ties keep candidate order.
    """
    if top_k < 1:
        raise ValueError(f"top_k must be at least 1, got {top_k}")
    if not chunks:
        return []
    ranked = sorted(keyword_scores(query, chunks), key=lambda item: item.score, reverse=True)
    return ranked[:top_k]


def keyword_scores(query: str, chunks: Sequence[SearchableChunk]) -> list[ScoredChunk]:
    """Score every chunk, unsorted and untruncated."""
    tokens = query_tokens(query)
    phrase = query.lower()[:PHRASE_CHARS]
    scored: list[ScoredChunk] = []
    for chunk in chunks:
        keywords = chunk_keywords(chunk.keywords)
        text = chunk.content.lower()
        score = 0
        for token in tokens:
            if token in keywords:
                score += KEYWORD_HIT
            if token in text:
                score += TEXT_HIT
        if phrase in text:
            score += PHRASE_BONUS
        scored.append(ScoredChunk(id=chunk.id, content=chunk.content, score=score))
    return scored


def chunk_keywords(raw: list[str] | str | None) -> list[str]:
    """Keywords as a list; stored JSON that fails to parse counts as none."""
    if not raw:
        return []
    if isinstance(raw, str):
        try:
            raw = orjson.loads(raw)
        except orjson.JSONDecodeError:
            return []
        if not isinstance(raw, list):
            return []
    return [item for item in raw if isinstance(item, str)]


__all__ = ["keyword_search", "keyword_scores", "chunk_keywords"]
