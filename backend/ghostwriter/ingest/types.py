"""Common ingestion data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class ChunkPayload:
    """Chunk produced by the chunker prior to persistence."""

    id: str
    document_id: str
    chunk_index: int
    content: str
    keywords: list[str] = field(default_factory=list)
    embedding: list[float] | None = None


@dataclass(slots=True)
class IngestResult:
    """Outcome for a single ingested document."""

    document_id: str
    doc_type: str
    chunk_count: int
    embedded: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "document_id": self.document_id,
            "type": self.doc_type,
            "chunk_count": self.chunk_count,
            "embedded": self.embedded,
        }


@dataclass(slots=True)
class BackfillStats:
    """Aggregated embedding backfill statistics."""

    indexed: int = 0
    skipped: int = 0
    errors: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "indexed": self.indexed,
            "skipped": self.skipped,
            "errors": self.errors,
        }


__all__ = ["ChunkPayload", "IngestResult", "BackfillStats"]
