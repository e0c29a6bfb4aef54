"""Prometheus metrics instrumentation."""

from __future__ import annotations

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Gauge, Histogram, generate_latest

REGISTRY = CollectorRegistry()

SEARCH_COUNT = Counter(
    "ghw_search_requests_total",
    "Hybrid search passes",
    labelnames=("doc_type",),
    registry=REGISTRY,
)

SEARCH_LATENCY = Histogram(
    "ghw_search_latency_seconds",
    "Latency of a hybrid search pass",
    labelnames=("doc_type",),
    registry=REGISTRY,
)

VECTOR_STRATEGY = Counter(
    "ghw_vector_strategy_total",
    "Vector scoring outcome per search pass",
    labelnames=("strategy",),
    registry=REGISTRY,
)

EMBEDDING_CACHE = Counter(
    "ghw_embedding_cache_total",
    "Embedding cache lookups",
    labelnames=("result",),
    registry=REGISTRY,
)

EMBEDDING_FAILURES = Counter(
    "ghw_embedding_failures_total",
    "Embedding backend calls that resolved to an empty vector",
    registry=REGISTRY,
)

CHUNKS_INDEXED = Counter(
    "ghw_chunks_indexed_total",
    "Chunks that received an embedding",
    registry=REGISTRY,
)

INDEX_SIZE = Gauge(
    "ghw_index_chunks",
    "Number of chunks stored",
    registry=REGISTRY,
)


def metrics_response() -> Response:
    """Return Prometheus metrics as an HTTP response."""
    payload = generate_latest(REGISTRY)
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "REGISTRY",
    "SEARCH_COUNT",
    "SEARCH_LATENCY",
    "VECTOR_STRATEGY",
    "EMBEDDING_CACHE",
    "EMBEDDING_FAILURES",
    "CHUNKS_INDEXED",
    "INDEX_SIZE",
    "metrics_response",
]
