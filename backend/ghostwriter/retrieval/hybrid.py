"""Hybrid ranking: lexical overlap blended with vector similarity."""

from __future__ import annotations

import logging
import sqlite3
from typing import Sequence

from ghostwriter.core.logging import log_context
from ghostwriter.core.metrics import VECTOR_STRATEGY
from ghostwriter.db.store import ChunkStore
from ghostwriter.ingest.embeddings import EmbeddingProvider
from ghostwriter.models.entities import ScoredChunk, SearchableChunk
from ghostwriter.retrieval.keyword import keyword_scores
from ghostwriter.retrieval.vector import (
    IN_PROCESS,
    NATIVE,
    Degraded,
    VectorOutcome,
    VectorScores,
    in_process_scores,
    native_scores,
)

logger = logging.getLogger(__name__)

KEYWORD_WEIGHT = 0.3
VECTOR_WEIGHT = 0.7
MIN_KEYWORD_MAX = 1.0
MIN_VECTOR_MAX = 0.001


def hybrid_search(
    query: str,
    chunks: Sequence[SearchableChunk],
    top_k: int = 4,
    *,
    provider: EmbeddingProvider | None = None,
    store: ChunkStore | None = None,
    keyword_weight: float = KEYWORD_WEIGHT,
    vector_weight: float = VECTOR_WEIGHT,
) -> list[ScoredChunk]:
    """Rank ``chunks`` by ``0.3 * keyword + 0.7 * vector``, both normalized per pass.

    Keyword scores are divided by the pass maximum (at least 1), vector
    similarities by theirs (at least 0.001). When no vector signal is
    available the ranking is keyword-only with weight 1.0. Scores are only
    comparable within one call.
    """
    if top_k < 1:
        raise ValueError(f"top_k must be at least 1, got {top_k}")
    if not chunks:
        return []

    keyword_map = {item.id: item.score for item in keyword_scores(query, chunks)}
    max_keyword = max(max(keyword_map.values(), default=0), MIN_KEYWORD_MAX)

    outcome = score_vectors(query, chunks, provider=provider, store=store, limit=top_k * 2)
    _log_outcome(outcome, len(chunks))
    has_embeddings = isinstance(outcome, VectorScores) and bool(outcome.scores)
    vector_map = outcome.scores if has_embeddings else {}
    max_vector = max(max(vector_map.values(), default=0.0), MIN_VECTOR_MAX)

    if has_embeddings:
        weights = (keyword_weight, vector_weight)
    else:
        weights = (1.0, 0.0)

    combined = [
        ScoredChunk(
            id=chunk.id,
            content=chunk.content,
            score=(keyword_map.get(chunk.id, 0) / max_keyword) * weights[0]
            + (vector_map.get(chunk.id, 0.0) / max_vector) * weights[1],
        )
        for chunk in chunks
    ]
    ranked = sorted((item for item in combined if item.score > 0), key=lambda item: item.score, reverse=True)
    return ranked[:top_k]


def score_vectors(
    query: str,
    chunks: Sequence[SearchableChunk],
    *,
    provider: EmbeddingProvider | None,
    store: ChunkStore | None = None,
    limit: int | None = None,
) -> VectorOutcome:
    """Decide how this pass gets its vector signal.

    Tries in order: ordering inside the store restricted to the candidate
    ids, then cosine over the candidates' own embeddings. Anything that goes
    wrong along the way yields :class:`Degraded` instead of an exception.
    """
    if provider is None:
        return Degraded("no embedding provider configured")
    try:
        query_vector = provider.embed(query)
        if not query_vector:
            return Degraded("query embedding unavailable")

        fallback_reason = None
        if store is not None and store.supports_native_vectors:
            try:
                scores = native_scores(store, query_vector, [chunk.id for chunk in chunks], limit or len(chunks))
            except sqlite3.Error as exc:
                logger.warning("Native vector ordering failed, scoring in process: %s", exc)
                fallback_reason = f"native ordering failed: {exc}"
            else:
                if scores:
                    return VectorScores(scores=scores, strategy=NATIVE)
                fallback_reason = "store returned no similar chunks"

        scores = in_process_scores(query_vector, chunks, limit)
        if not scores:
            return Degraded("no candidate carries a usable embedding")
        return VectorScores(scores=scores, strategy=IN_PROCESS, fallback_reason=fallback_reason)
    except Exception as exc:
        logger.exception("Vector scoring failed; ranking by keywords only")
        return Degraded(f"vector scoring raised {type(exc).__name__}: {exc}")


def _log_outcome(outcome: VectorOutcome, candidates: int) -> None:
    if isinstance(outcome, VectorScores):
        VECTOR_STRATEGY.labels(strategy=outcome.strategy).inc()
        logger.debug(
            "Vector scores via %s for %s of %s candidates",
            outcome.strategy,
            len(outcome.scores),
            candidates,
            extra=log_context(strategy=outcome.strategy, fallback_reason=outcome.fallback_reason),
        )
        return
    VECTOR_STRATEGY.labels(strategy="degraded").inc()
    logger.info(
        "Keyword-only ranking: %s",
        outcome.reason,
        extra=log_context(strategy="degraded", candidates=candidates),
    )


__all__ = ["hybrid_search", "score_vectors", "KEYWORD_WEIGHT", "VECTOR_WEIGHT"]
