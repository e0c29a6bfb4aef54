"""Ingest API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ghostwriter.api.dependencies import get_ingest_pipeline
from ghostwriter.core.errors import EmptyDocumentError
from ghostwriter.ingest.pipeline import IngestPipeline
from ghostwriter.models.dto import IngestRequest, IngestResponse, ReindexResponse

router = APIRouter()


@router.post("/ingest", response_model=IngestResponse, summary="Chunk, index and store a document")
def ingest_document(
    request: IngestRequest,
    pipeline: IngestPipeline = Depends(get_ingest_pipeline),
) -> IngestResponse:
    try:
        result = pipeline.ingest_text(
            request.text,
            request.type,
            filename=request.filename,
            project_id=request.project_id,
            user_id=request.user_id,
        )
    except EmptyDocumentError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return IngestResponse(**result.to_dict())


@router.post("/reindex", response_model=ReindexResponse, summary="Embed chunks stored without a vector")
def reindex(pipeline: IngestPipeline = Depends(get_ingest_pipeline)) -> ReindexResponse:
    stats = pipeline.backfill_embeddings()
    return ReindexResponse(**stats.to_dict())
