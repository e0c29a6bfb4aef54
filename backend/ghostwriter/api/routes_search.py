"""Search API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ghostwriter.api.dependencies import get_search_service
from ghostwriter.models.dto import ContextRequest, ContextResponse, ScoredChunkResult, SearchRequest, SearchResponse
from ghostwriter.models.entities import ScoredChunk
from ghostwriter.retrieval.search import SearchService

router = APIRouter()


@router.post("/search", response_model=SearchResponse, summary="Hybrid search over one document type")
def run_search(
    request: SearchRequest,
    service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    results = service.search(request.query, request.type, project_id=request.project_id, top_k=request.k)
    return SearchResponse(results=_to_results(results))


@router.post("/context", response_model=ContextResponse, summary="Style and content chunks for a chat turn")
def build_context(
    request: ContextRequest,
    service: SearchService = Depends(get_search_service),
) -> ContextResponse:
    ranked = service.context(request.query, project_id=request.project_id)
    return ContextResponse(style=_to_results(ranked["style"]), content=_to_results(ranked["content"]))


def _to_results(items: list[ScoredChunk]) -> list[ScoredChunkResult]:
    return [ScoredChunkResult(**item.to_dict()) for item in items]
