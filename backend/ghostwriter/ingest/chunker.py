"""Chunking utilities."""

from __future__ import annotations

from typing import Iterable, Iterator

from ghostwriter.core.errors import InvalidChunkingParameters
from ghostwriter.ingest.keywords import extract_keywords
from ghostwriter.ingest.types import ChunkPayload
from ghostwriter.utils.ids import new_id

MIN_CHUNK_CHARS = 50
BREAK_LOOKBACK = 100
PARAGRAPH_LOOKAHEAD = 100
SENTENCE_LOOKAHEAD = 50

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_OVERLAP = 200


def chunk_text(text: str, chunk_size: int = DEFAULT_CHUNK_SIZE, overlap: int = DEFAULT_OVERLAP) -> list[str]:
    """Split text into overlapping windows that prefer paragraph and sentence ends.

    Windows are ``chunk_size`` characters long and consecutive windows share
    ``overlap`` characters. A cut near a ``"\\n\\n"`` or ``". "`` is moved to
    just after it. Pieces of 50 characters or fewer (after stripping) are
    dropped, so whitespace-only input yields an empty list.
    """
    validate_chunking(chunk_size, overlap)
    if not text.strip():
        return []
    return [piece for piece in _iter_windows(text, chunk_size, overlap) if len(piece) > MIN_CHUNK_CHARS]


def validate_chunking(chunk_size: int, overlap: int) -> None:
    if chunk_size <= 0:
        raise InvalidChunkingParameters(f"chunk_size must be positive, got {chunk_size}")
    if overlap < 0:
        raise InvalidChunkingParameters(f"overlap must not be negative, got {overlap}")
    if overlap >= chunk_size:
        raise InvalidChunkingParameters(
            f"overlap ({overlap}) must be smaller than chunk_size ({chunk_size})"
        )


def _iter_windows(text: str, chunk_size: int, overlap: int) -> Iterator[str]:
    length = len(text)
    start = 0
    while start < length:
        end = start + chunk_size
        if end < length:
            end = _snap_to_boundary(text, start, end)
        yield text[start:end].strip()
        # the window always moves forward, even when a break pulled ``end`` back
        start = max(end - overlap, start + 1)


def _snap_to_boundary(text: str, start: int, end: int) -> int:
    search_from = max(end - BREAK_LOOKBACK, start + 1)
    paragraph = text.find("\n\n", search_from)
    if paragraph != -1 and paragraph < end + PARAGRAPH_LOOKAHEAD:
        return paragraph + 2
    sentence = text.find(". ", search_from)
    if sentence != -1 and sentence < end + SENTENCE_LOOKAHEAD:
        return sentence + 2
    return end


def build_chunk_payloads(document_id: str, chunks: Iterable[str]) -> list[ChunkPayload]:
    """Attach ids, ordinals and keywords to raw chunk strings."""
    return [
        ChunkPayload(
            id=new_id("chk"),
            document_id=document_id,
            chunk_index=index,
            content=content,
            keywords=extract_keywords(content),
        )
        for index, content in enumerate(chunks)
    ]


__all__ = ["chunk_text", "validate_chunking", "build_chunk_payloads", "MIN_CHUNK_CHARS"]
