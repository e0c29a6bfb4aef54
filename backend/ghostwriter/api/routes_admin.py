"""Administrative routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ghostwriter.api.dependencies import get_chunk_store
from ghostwriter.core.metrics import metrics_response
from ghostwriter.db.store import ChunkStore
from ghostwriter.models.dto import ChunkDetail, ChunksResponse

router = APIRouter()


@router.get("/chunks", response_model=ChunksResponse, summary="Fetch chunks by id")
def get_chunks(
    ids: str | None = Query(default=None, description="Comma-separated chunk ids"),
    store: ChunkStore = Depends(get_chunk_store),
) -> ChunksResponse:
    chunk_ids = [value for value in (ids or "").split(",") if value]
    if not chunk_ids:
        raise HTTPException(status_code=400, detail="No chunk IDs provided")
    chunks = store.get_chunks(chunk_ids)
    if not chunks:
        raise HTTPException(status_code=404, detail="No chunks found for the given IDs")
    return ChunksResponse(
        chunks=[
            ChunkDetail(id=chunk.id, content=chunk.content, type=chunk.doc_type, filename=chunk.filename)
            for chunk in chunks
        ]
    )


@router.get("/metrics", summary="Prometheus metrics")
def get_metrics():
    return metrics_response()


__all__ = ["router"]
