"""Vector similarity search with an in-SQL path and an in-process fallback."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Iterable, Sequence, Union

from ghostwriter.db.store import CandidateFilter, ChunkStore
from ghostwriter.ingest.embeddings import EmbeddingProvider
from ghostwriter.models.entities import ScoredChunk, SearchableChunk
from ghostwriter.utils.vectors import cosine_similarity, parse_embedding

logger = logging.getLogger(__name__)

NATIVE = "native"
IN_PROCESS = "in_process"


@dataclass(slots=True)
class VectorScores:
    """Similarity per chunk id, with the strategy that produced it."""

    scores: dict[str, float]
    strategy: str
    fallback_reason: str | None = None


@dataclass(slots=True)
class Degraded:
    """No usable vector signal for this pass."""

    reason: str


VectorOutcome = Union[VectorScores, Degraded]


class VectorSearcher:
    """Scores a store-side scope against a query embedding."""

    def __init__(self, provider: EmbeddingProvider, store: ChunkStore) -> None:
        self.provider = provider
        self.store = store

    def search(self, query: str, scope: CandidateFilter, top_k: int = 4) -> list[ScoredChunk]:
        if top_k < 1:
            raise ValueError(f"top_k must be at least 1, got {top_k}")
        query_vector = self.provider.embed(query)
        if not query_vector:
            return []
        try:
            rows = self.store.nearest_chunks(query_vector, scope, top_k)
            scored = [ScoredChunk(id=cid, content=content, score=1.0 - distance) for cid, content, distance in rows]
        except sqlite3.Error as exc:
            logger.warning("Native vector ordering unavailable, scanning instead: %s", exc)
            scored = [
                ScoredChunk(id=cid, content=content, score=score)
                for cid, content, score in _scan_similarities(query_vector, self.store.iter_embedded(scope))
            ]
        return rank_positive(scored, top_k)


def native_scores(
    store: ChunkStore,
    query_vector: Sequence[float],
    chunk_ids: Sequence[str],
    limit: int,
) -> dict[str, float]:
    """Similarity for the ``limit`` nearest of ``chunk_ids``, computed inside SQLite."""
    scope = CandidateFilter(chunk_ids=list(chunk_ids), active_only=False)
    rows = store.nearest_chunks(query_vector, scope, limit)
    return {cid: 1.0 - distance for cid, _, distance in rows if 1.0 - distance > 0}


def in_process_scores(
    query_vector: Sequence[float],
    chunks: Sequence[SearchableChunk],
    limit: int | None = None,
) -> dict[str, float]:
    """Cosine similarity over the candidates' own stored vectors.

    Chunks without an embedding, or with one that does not parse, are
    skipped. Only positive similarities are kept, best ``limit`` first.
    """
    triples = ((chunk.id, chunk.content, chunk.embedding) for chunk in chunks)
    scored = [
        ScoredChunk(id=cid, content=content, score=score)
        for cid, content, score in _scan_similarities(query_vector, triples)
    ]
    ranked = rank_positive(scored, limit)
    return {item.id: item.score for item in ranked}


def rank_positive(scored: Iterable[ScoredChunk], top_k: int | None) -> list[ScoredChunk]:
    positive = [item for item in scored if item.score > 0]
    positive.sort(key=lambda item: item.score, reverse=True)
    return positive if top_k is None else positive[:top_k]


def _scan_similarities(
    query_vector: Sequence[float],
    rows: Iterable[tuple[str, str, object]],
) -> Iterable[tuple[str, str, float]]:
    for chunk_id, content, raw in rows:
        vector = parse_embedding(raw)
        if vector is None:
            continue
        yield chunk_id, content, cosine_similarity(query_vector, vector)


__all__ = [
    "VectorSearcher",
    "VectorScores",
    "Degraded",
    "VectorOutcome",
    "native_scores",
    "in_process_scores",
    "rank_positive",
    "NATIVE",
    "IN_PROCESS",
]
