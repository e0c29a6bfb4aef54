"""Embedding provider, backends and the in-process vector cache."""

from __future__ import annotations

import logging
import math
import threading
from collections import OrderedDict
from typing import Callable, Protocol, Sequence

from ghostwriter.core.config import Settings
from ghostwriter.core.errors import EmbeddingError
from ghostwriter.core.metrics import EMBEDDING_CACHE, EMBEDDING_FAILURES
from ghostwriter.ingest.keywords import tokenize
from ghostwriter.utils.hashing import blake2b_slot, sha256_text

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 8000
PREFIX_KEY_CHARS = 100

KeyFunction = Callable[[str], str]


def prefix_key(text: str) -> str:
    """Cache key made of the first 100 characters; long texts sharing a prefix collide."""
    return text[:PREFIX_KEY_CHARS]


def content_hash_key(text: str) -> str:
    return sha256_text(text)


class EmbeddingCache:
    """Thread-safe vector cache with a pluggable key and optional LRU bound."""

    def __init__(self, key_fn: KeyFunction = prefix_key, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive or None")
        self.key_fn = key_fn
        self.max_entries = max_entries
        self._entries: OrderedDict[str, list[float]] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, text: str) -> list[float] | None:
        key = self.key_fn(text)
        with self._lock:
            vector = self._entries.get(key)
            if vector is not None:
                self._entries.move_to_end(key)
            return vector

    def put(self, text: str, vector: list[float]) -> None:
        key = self.key_fn(text)
        with self._lock:
            self._entries[key] = vector
            self._entries.move_to_end(key)
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class EmbeddingBackend(Protocol):
    name: str

    def encode(self, texts: Sequence[str]) -> list[list[float]]:
        ...


class HashedEmbeddingBackend:
    """Deterministic hashed bag-of-words vectors; needs no network."""

    name = "hashed"

    def __init__(self, dim: int = 384) -> None:
        self.dim = dim

    def encode(self, texts: Sequence[str]) -> list[list[float]]:
        vectors: list[list[float]] = []
        for text in texts:
            vector = [0.0] * self.dim
            for token in tokenize(text):
                vector[blake2b_slot(token, self.dim)] += 1.0
            _normalize(vector)
            vectors.append(vector)
        return vectors


class OpenAIEmbeddingBackend:
    """OpenAI-compatible embeddings endpoint with an explicit request timeout."""

    name = "openai"

    def __init__(
        self,
        model: str,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = 10.0,
    ) -> None:
        from openai import OpenAI

        self.model = model
        self._client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=1)

    def encode(self, texts: Sequence[str]) -> list[list[float]]:
        try:
            response = self._client.embeddings.create(model=self.model, input=list(texts))
        except Exception as exc:
            raise EmbeddingError(f"embedding request failed: {exc}") from exc
        items = sorted(response.data, key=lambda item: item.index)
        if len(items) != len(texts):
            raise EmbeddingError(f"expected {len(texts)} embeddings, got {len(items)}")
        return [list(item.embedding) for item in items]


class EmbeddingProvider:
    """Uniform ``embed`` entry point that never raises on backend trouble.

    Inputs are cut to ``max_chars`` before reaching the backend. Failures are
    logged and resolve to an empty vector so callers can fall back to keyword
    ranking. Only non-empty vectors are cached.
    """

    def __init__(
        self,
        backend: EmbeddingBackend,
        cache: EmbeddingCache | None = None,
        max_chars: int = DEFAULT_MAX_CHARS,
    ) -> None:
        self.backend = backend
        self.cache = cache if cache is not None else EmbeddingCache()
        self.max_chars = max_chars

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmbeddingProvider":
        backend: EmbeddingBackend
        if settings.embedding_backend == "openai":
            backend = OpenAIEmbeddingBackend(
                model=settings.embedding_model,
                api_key=settings.embedding_api_key,
                base_url=settings.embedding_base_url,
                timeout=settings.embedding_timeout,
            )
        else:
            backend = HashedEmbeddingBackend(dim=settings.embedding_dim)
        key_fn = content_hash_key if settings.cache_key == "sha256" else prefix_key
        cache = EmbeddingCache(key_fn=key_fn, max_entries=settings.cache_max_entries)
        return cls(backend=backend, cache=cache, max_chars=settings.embedding_max_chars)

    def embed(self, text: str) -> list[float]:
        cached = self.cache.get(text)
        if cached is not None:
            EMBEDDING_CACHE.labels(result="hit").inc()
            return list(cached)
        EMBEDDING_CACHE.labels(result="miss").inc()
        try:
            vectors = self.backend.encode([text[: self.max_chars]])
            vector = _checked_vector(vectors[0] if vectors else [])
        except Exception as exc:
            EMBEDDING_FAILURES.inc()
            logger.warning("Embedding via %s failed: %s", self.backend.name, exc)
            return []
        if vector:
            self.cache.put(text, vector)
        return list(vector)

    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed many texts with one backend call for the cache misses."""
        results: list[list[float]] = [[] for _ in texts]
        missing: list[int] = []
        for idx, text in enumerate(texts):
            cached = self.cache.get(text)
            if cached is not None:
                EMBEDDING_CACHE.labels(result="hit").inc()
                results[idx] = list(cached)
            else:
                EMBEDDING_CACHE.labels(result="miss").inc()
                missing.append(idx)
        if not missing:
            return results
        try:
            vectors = self.backend.encode([texts[idx][: self.max_chars] for idx in missing])
            if len(vectors) != len(missing):
                raise EmbeddingError(f"expected {len(missing)} embeddings, got {len(vectors)}")
            checked = [_checked_vector(vector) for vector in vectors]
        except Exception as exc:
            EMBEDDING_FAILURES.inc()
            logger.warning("Batch embedding of %s texts via %s failed: %s", len(missing), self.backend.name, exc)
            return results
        for idx, vector in zip(missing, checked):
            if vector:
                self.cache.put(texts[idx], vector)
            results[idx] = list(vector)
        return results


def _checked_vector(vector: Sequence[float]) -> list[float]:
    values = [float(value) for value in vector]
    if not all(math.isfinite(value) for value in values):
        raise EmbeddingError("embedding contains non-finite values")
    return values


def _normalize(vector: list[float]) -> None:
    norm = math.sqrt(sum(value * value for value in vector))
    if norm == 0:
        return
    inv = 1.0 / norm
    for idx, value in enumerate(vector):
        vector[idx] = value * inv


__all__ = [
    "EmbeddingProvider",
    "EmbeddingCache",
    "EmbeddingBackend",
    "HashedEmbeddingBackend",
    "OpenAIEmbeddingBackend",
    "prefix_key",
    "content_hash_key",
]
