"""Internal dataclasses representing persisted and ranked entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DOCUMENT_TYPES: tuple[str, ...] = ("style", "content")


@dataclass(slots=True)
class Document:
    id: str
    type: str
    project_id: str | None
    user_id: str | None
    filename: str | None
    is_active: bool
    chunk_count: int
    created_at: int


@dataclass(slots=True)
class SearchableChunk:
    """A candidate handed to ranking.

    ``keywords`` may be a list or the JSON text stored with the chunk;
    ``embedding`` may be a vector, its stored text form, or ``None``.
    """

    id: str
    content: str
    keywords: list[str] | str | None = field(default_factory=list)
    embedding: list[float] | str | None = None


@dataclass(slots=True)
class ScoredChunk:
    """Ranked result; scores only compare within one ranking pass."""

    id: str
    content: str
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "content": self.content, "score": self.score}


@dataclass(slots=True)
class StoredChunk:
    id: str
    document_id: str
    chunk_index: int
    content: str
    keywords: list[str]
    embedding: str | None
    doc_type: str | None = None
    filename: str | None = None

    def as_searchable(self) -> SearchableChunk:
        return SearchableChunk(id=self.id, content=self.content, keywords=self.keywords, embedding=self.embedding)


__all__ = [
    "DOCUMENT_TYPES",
    "Document",
    "SearchableChunk",
    "ScoredChunk",
    "StoredChunk",
]
