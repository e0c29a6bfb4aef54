"""Shared FastAPI dependencies; the composition root of the retrieval core."""

from __future__ import annotations

from functools import lru_cache

from ghostwriter.core.config import Settings, get_settings
from ghostwriter.db.sqlite import SQLiteDatabase
from ghostwriter.db.store import ChunkStore
from ghostwriter.ingest.embeddings import EmbeddingProvider
from ghostwriter.ingest.pipeline import IngestPipeline
from ghostwriter.retrieval import SearchService

_DB: SQLiteDatabase | None = None
_PROVIDER: EmbeddingProvider | None = None
_PIPELINE: IngestPipeline | None = None
_SEARCH_SERVICE: SearchService | None = None


@lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    return get_settings()


def get_database() -> SQLiteDatabase:
    global _DB
    if _DB is None:
        settings = get_app_settings()
        db = SQLiteDatabase(settings.db_path, native_vectors=settings.native_vectors)
        db.ensure_schema()
        _DB = db
    return _DB


def get_chunk_store() -> ChunkStore:
    return ChunkStore(get_database())


def get_embedding_provider() -> EmbeddingProvider:
    global _PROVIDER
    if _PROVIDER is None:
        _PROVIDER = EmbeddingProvider.from_settings(get_app_settings())
    return _PROVIDER


def get_ingest_pipeline() -> IngestPipeline:
    global _PIPELINE
    if _PIPELINE is None:
        _PIPELINE = IngestPipeline(
            store=get_chunk_store(),
            provider=get_embedding_provider(),
            settings=get_app_settings(),
        )
    return _PIPELINE


def get_search_service() -> SearchService:
    global _SEARCH_SERVICE
    if _SEARCH_SERVICE is None:
        _SEARCH_SERVICE = SearchService(
            store=get_chunk_store(),
            provider=get_embedding_provider(),
            settings=get_app_settings(),
        )
    return _SEARCH_SERVICE


def reset_dependencies() -> None:
    """Drop every cached component, closing the database."""
    global _DB, _PROVIDER, _PIPELINE, _SEARCH_SERVICE
    if _DB is not None:
        _DB.close()
    _DB = None
    _PROVIDER = None
    _PIPELINE = None
    _SEARCH_SERVICE = None
    get_app_settings.cache_clear()
    get_settings.cache_clear()


__all__ = [
    "get_app_settings",
    "get_database",
    "get_chunk_store",
    "get_embedding_provider",
    "get_ingest_pipeline",
    "get_search_service",
    "reset_dependencies",
]
