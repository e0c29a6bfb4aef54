"""Tests for ingestion, embedding backfill and the search service."""

import sqlite3
from pathlib import Path

import pytest

from fakes import StaticBackend
from ghostwriter.core.config import Settings
from ghostwriter.core.errors import EmptyDocumentError, InvalidDocumentType
from ghostwriter.db.store import CandidateFilter, ChunkStore
from ghostwriter.ingest.embeddings import EmbeddingProvider, HashedEmbeddingBackend
from ghostwriter.ingest.pipeline import IngestPipeline
from ghostwriter.retrieval import SearchService
from ghostwriter.utils.vectors import parse_embedding


def _pipeline(store: ChunkStore, tmp_path: Path, **overrides) -> IngestPipeline:
    settings = Settings(db_path=tmp_path / "unused.db", **overrides)
    return IngestPipeline(store, EmbeddingProvider(HashedEmbeddingBackend(dim=32)), settings)


def test_ingest_content_document(store: ChunkStore, tmp_path: Path, prose: str) -> None:
    result = _pipeline(store, tmp_path).ingest_text(prose, "content", filename="prose.txt", project_id="p1")
    assert result.chunk_count == 3
    assert result.embedded == 3
    chunks = store.list_candidates(CandidateFilter(doc_type="content", project_ids=["p1"]))
    assert [chunk.chunk_index for chunk in chunks] == [0, 1, 2]
    assert all(chunk.keywords for chunk in chunks)
    assert all(len(parse_embedding(chunk.embedding)) == 32 for chunk in chunks)
    assert chunks[0].filename == "prose.txt"


def test_style_documents_use_wider_windows(store: ChunkStore, tmp_path: Path) -> None:
    text = ("voice tone rhythm cadence " * 200)[:3000]
    result = _pipeline(store, tmp_path).ingest_text(text, "style")
    assert result.chunk_count == 2


@pytest.mark.parametrize("text", ["", "   \n\n  ", "too short to keep"])
def test_empty_ingest_writes_nothing(store: ChunkStore, tmp_path: Path, text: str) -> None:
    with pytest.raises(EmptyDocumentError):
        _pipeline(store, tmp_path).ingest_text(text, "content")
    assert store.count_chunks() == 0


def test_unknown_document_type(store: ChunkStore, tmp_path: Path, prose: str) -> None:
    with pytest.raises(InvalidDocumentType):
        _pipeline(store, tmp_path).ingest_text(prose, "poetry")


def test_backfill_embeds_pending_chunks(store: ChunkStore, tmp_path: Path, prose: str) -> None:
    pipeline = _pipeline(store, tmp_path, embed_on_ingest=False)
    assert pipeline.ingest_text(prose, "content").embedded == 0
    assert len(store.list_unembedded()) == 3

    stats = pipeline.backfill_embeddings()
    assert stats.to_dict() == {"indexed": 3, "skipped": 0, "errors": 0}
    assert store.list_unembedded() == []
    assert pipeline.backfill_embeddings().to_dict() == {"indexed": 0, "skipped": 0, "errors": 0}


def test_backfill_counts_skips_and_errors(
    store: ChunkStore, tmp_path: Path, prose: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    pipeline = _pipeline(store, tmp_path, embed_on_ingest=False)
    pipeline.ingest_text(prose, "content")
    pending = store.list_unembedded()

    pipeline.provider = EmbeddingProvider(StaticBackend({pending[0].content: [1.0, 0.0], pending[1].content: [0.0, 1.0]}))
    original = store.set_embedding

    def flaky(chunk_id, vector):
        if chunk_id == pending[1].id:
            raise sqlite3.OperationalError("database is locked")
        return original(chunk_id, vector)

    monkeypatch.setattr(store, "set_embedding", flaky)
    stats = pipeline.backfill_embeddings()
    assert stats.to_dict() == {"indexed": 1, "skipped": 1, "errors": 1}
    assert [chunk.id for chunk in store.list_unembedded()] == [pending[1].id, pending[2].id]


def test_backfill_respects_limit(store: ChunkStore, tmp_path: Path, prose: str) -> None:
    pipeline = _pipeline(store, tmp_path, embed_on_ingest=False)
    pipeline.ingest_text(prose, "content")
    assert pipeline.backfill_embeddings(limit=2).indexed == 2
    assert len(store.list_unembedded()) == 1


def _service(store: ChunkStore, tmp_path: Path) -> tuple[IngestPipeline, SearchService]:
    settings = Settings(db_path=tmp_path / "unused.db")
    provider = EmbeddingProvider(HashedEmbeddingBackend(dim=64))
    return IngestPipeline(store, provider, settings), SearchService(store, provider, settings)


def test_search_service_scopes_by_project_and_type(store: ChunkStore, tmp_path: Path) -> None:
    pipeline, service = _service(store, tmp_path)
    cats = "O gato dorme no sofá enquanto eu trabalho em home office, e o gato ronrona baixinho. " * 3
    dogs = "O cachorro late no quintal quando o carteiro chega pela manhã, todo santo dia. " * 3
    voice = "Escreva com frases curtas, tom leve e um toque de humor sobre o gato da casa. " * 3
    cat_doc = pipeline.ingest_text(cats, "content", project_id="p1")
    pipeline.ingest_text(dogs, "content", project_id="p2")
    pipeline.ingest_text(voice, "style", project_id="p1")

    everywhere = service.search("gato home office", "content", project_id="all", top_k=4)
    assert everywhere
    top = store.get_chunks([everywhere[0].id])[0]
    assert top.document_id == cat_doc.document_id

    only_dogs = service.search("gato home office", "content", project_id="p2", top_k=4)
    assert all(store.get_chunks([item.id])[0].document_id != cat_doc.document_id for item in only_dogs)

    context = service.context("gato", project_id="p1")
    assert len(context["style"]) == 1
    assert len(context["content"]) == 1

    vector_hits = service.vector_search("gato home office", "content", top_k=2)
    assert 1 <= len(vector_hits) <= 2

    with pytest.raises(InvalidDocumentType):
        service.search("gato", "poetry")
