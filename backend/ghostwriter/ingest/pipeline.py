"""Ingest pipeline orchestration."""

from __future__ import annotations

from ghostwriter.core.config import Settings
from ghostwriter.core.errors import EmptyDocumentError, InvalidDocumentType
from ghostwriter.core.logging import get_logger
from ghostwriter.core.metrics import CHUNKS_INDEXED, INDEX_SIZE
from ghostwriter.db.store import ChunkStore
from ghostwriter.ingest.chunker import build_chunk_payloads, chunk_text
from ghostwriter.ingest.embeddings import EmbeddingProvider
from ghostwriter.ingest.types import BackfillStats, IngestResult
from ghostwriter.models.entities import DOCUMENT_TYPES
from ghostwriter.utils.ids import new_id

logger = get_logger(__name__)


class IngestPipeline:
    """Coordinate chunking, keyword extraction, embeddings and persistence."""

    def __init__(self, store: ChunkStore, provider: EmbeddingProvider, settings: Settings) -> None:
        self.store = store
        self.provider = provider
        self.settings = settings

    def ingest_text(
        self,
        text: str,
        doc_type: str,
        *,
        filename: str | None = None,
        project_id: str | None = None,
        user_id: str | None = None,
    ) -> IngestResult:
        if doc_type not in DOCUMENT_TYPES:
            raise InvalidDocumentType(f"type must be one of {', '.join(DOCUMENT_TYPES)}, got {doc_type!r}")
        chunk_size, overlap = self.settings.chunking_for(doc_type)
        pieces = chunk_text(text, chunk_size, overlap)
        if not pieces:
            raise EmptyDocumentError("document produced no chunks longer than 50 characters")

        document_id = new_id("doc")
        payloads = build_chunk_payloads(document_id, pieces)
        embedded = 0
        if self.settings.embed_on_ingest:
            vectors = self.provider.embed_batch([payload.content for payload in payloads])
            for payload, vector in zip(payloads, vectors):
                if vector:
                    payload.embedding = vector
                    embedded += 1

        self.store.insert_document(
            doc_type,
            payloads,
            document_id=document_id,
            project_id=project_id,
            user_id=user_id,
            filename=filename,
        )
        CHUNKS_INDEXED.inc(embedded)
        self._update_index_metric()
        logger.info(
            "Ingested %s document %s: %s chunks, %s embedded",
            doc_type,
            document_id,
            len(payloads),
            embedded,
        )
        return IngestResult(document_id=document_id, doc_type=doc_type, chunk_count=len(payloads), embedded=embedded)

    def store_embedding(self, chunk_id: str, text: str) -> bool:
        """Embed one chunk and store the vector; False when nothing was stored."""
        vector = self.provider.embed(text)
        if not vector:
            return False
        stored = self.store.set_embedding(chunk_id, vector)
        if stored:
            CHUNKS_INDEXED.inc()
        return stored

    def backfill_embeddings(self, limit: int | None = None) -> BackfillStats:
        """Embed chunks that were stored without a vector."""
        stats = BackfillStats()
        pending = self.store.list_unembedded(limit)
        logger.info("Backfilling embeddings for %s chunks", len(pending))
        for chunk in pending:
            try:
                if self.store_embedding(chunk.id, chunk.content):
                    stats.indexed += 1
                else:
                    stats.skipped += 1
            except Exception as exc:
                logger.exception("Error indexing chunk %s: %s", chunk.id, exc)
                stats.errors += 1
        return stats

    def _update_index_metric(self) -> None:
        INDEX_SIZE.set(self.store.count_chunks())


__all__ = ["IngestPipeline"]
