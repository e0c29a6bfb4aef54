"""Search orchestration over stored chunks."""

from __future__ import annotations

import time

from ghostwriter.core.config import Settings
from ghostwriter.core.errors import InvalidDocumentType
from ghostwriter.core.metrics import SEARCH_COUNT, SEARCH_LATENCY
from ghostwriter.db.store import CandidateFilter, ChunkStore
from ghostwriter.ingest.embeddings import EmbeddingProvider
from ghostwriter.models.entities import DOCUMENT_TYPES, ScoredChunk, SearchableChunk
from ghostwriter.retrieval.hybrid import hybrid_search
from ghostwriter.retrieval.vector import VectorSearcher

ALL_PROJECTS = "all"
STYLE_CONTEXT_K = 2
CONTENT_CONTEXT_K = 4


class SearchService:
    """Loads scoped candidates from the store and ranks them."""

    def __init__(self, store: ChunkStore, provider: EmbeddingProvider, settings: Settings) -> None:
        self.store = store
        self.provider = provider
        self.settings = settings
        self.vector_searcher = VectorSearcher(provider, store)

    def candidates(self, doc_type: str, project_id: str | None = None) -> list[SearchableChunk]:
        return [chunk.as_searchable() for chunk in self.store.list_candidates(self._scope(doc_type, project_id))]

    def search(
        self,
        query: str,
        doc_type: str,
        project_id: str | None = None,
        top_k: int | None = None,
    ) -> list[ScoredChunk]:
        start_time = time.perf_counter()
        candidates = self.candidates(doc_type, project_id)
        results = hybrid_search(
            query,
            candidates,
            top_k or self.settings.top_k,
            provider=self.provider,
            store=self.store,
            keyword_weight=self.settings.keyword_weight,
            vector_weight=self.settings.vector_weight,
        )
        SEARCH_LATENCY.labels(doc_type=doc_type).observe(time.perf_counter() - start_time)
        SEARCH_COUNT.labels(doc_type=doc_type).inc()
        return results

    def vector_search(
        self,
        query: str,
        doc_type: str,
        project_id: str | None = None,
        top_k: int | None = None,
    ) -> list[ScoredChunk]:
        return self.vector_searcher.search(query, self._scope(doc_type, project_id), top_k or self.settings.top_k)

    def context(self, query: str, project_id: str | None = None) -> dict[str, list[ScoredChunk]]:
        """Style and content rankings in the shape chat orchestration consumes."""
        return {
            "style": self.search(query, "style", project_id, STYLE_CONTEXT_K),
            "content": self.search(query, "content", project_id, CONTENT_CONTEXT_K),
        }

    @staticmethod
    def _scope(doc_type: str, project_id: str | None) -> CandidateFilter:
        if doc_type not in DOCUMENT_TYPES:
            raise InvalidDocumentType(f"type must be one of {', '.join(DOCUMENT_TYPES)}, got {doc_type!r}")
        project_ids = None if project_id in (None, ALL_PROJECTS) else [project_id]
        return CandidateFilter(doc_type=doc_type, project_ids=project_ids)


__all__ = ["SearchService"]
