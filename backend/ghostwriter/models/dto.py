"""Pydantic DTOs exposed via API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class IngestRequest(BaseModel):
    text: str = Field(description="Extracted document text")
    type: Literal["style", "content"]
    filename: str | None = None
    project_id: str | None = None
    user_id: str | None = None


class IngestResponse(BaseModel):
    document_id: str
    type: Literal["style", "content"]
    chunk_count: int
    embedded: int


class SearchRequest(BaseModel):
    query: str = Field(min_length=1)
    type: Literal["style", "content"]
    project_id: str | None = Field(default=None, description='Project scope; "all" or null searches every project')
    k: int = Field(default=4, ge=1, le=50)


class ContextRequest(BaseModel):
    query: str = Field(min_length=1)
    project_id: str | None = None


class ScoredChunkResult(BaseModel):
    id: str
    content: str
    score: float


class SearchResponse(BaseModel):
    results: list[ScoredChunkResult]


class ContextResponse(BaseModel):
    style: list[ScoredChunkResult]
    content: list[ScoredChunkResult]


class ChunkDetail(BaseModel):
    id: str
    content: str
    type: str | None
    filename: str | None


class ChunksResponse(BaseModel):
    chunks: list[ChunkDetail]


class ReindexResponse(BaseModel):
    indexed: int
    skipped: int
    errors: int


__all__ = [
    "IngestRequest",
    "IngestResponse",
    "SearchRequest",
    "ContextRequest",
    "ScoredChunkResult",
    "SearchResponse",
    "ContextResponse",
    "ChunkDetail",
    "ChunksResponse",
    "ReindexResponse",
]
