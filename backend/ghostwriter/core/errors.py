"""Exception hierarchy for the retrieval core."""

from __future__ import annotations


class GhostwriterError(Exception):
    """Base class for retrieval core errors."""


class InvalidChunkingParameters(GhostwriterError, ValueError):
    """Raised when chunk size or overlap cannot produce a sliding window."""


class EmptyDocumentError(GhostwriterError, ValueError):
    """Raised when ingested text yields no storable chunks."""


class InvalidDocumentType(GhostwriterError, ValueError):
    """Raised for a document type other than ``style`` or ``content``."""


class EmbeddingError(GhostwriterError):
    """Raised by embedding backends; never escapes the provider."""


__all__ = [
    "GhostwriterError",
    "InvalidChunkingParameters",
    "EmptyDocumentError",
    "InvalidDocumentType",
    "EmbeddingError",
]
