"""Application configuration handling."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Mapping

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

ENV_PREFIX = "GHW_"
DEFAULT_CONFIG_PATH = Path("~/.config/ghostwriter/config.yaml")

_YAML_KEY_MAP: Mapping[tuple[str, ...], str] = {
    ("storage", "db_path"): "db_path",
    ("storage", "native_vectors"): "native_vectors",
    ("embeddings", "backend"): "embedding_backend",
    ("embeddings", "model"): "embedding_model",
    ("embeddings", "dim"): "embedding_dim",
    ("embeddings", "max_chars"): "embedding_max_chars",
    ("embeddings", "timeout"): "embedding_timeout",
    ("embeddings", "api_key"): "embedding_api_key",
    ("embeddings", "base_url"): "embedding_base_url",
    ("cache", "key"): "cache_key",
    ("cache", "max_entries"): "cache_max_entries",
    ("search", "top_k"): "top_k",
    ("search", "keyword_weight"): "keyword_weight",
    ("search", "vector_weight"): "vector_weight",
    ("chunking", "style_size"): "style_chunk_size",
    ("chunking", "style_overlap"): "style_chunk_overlap",
    ("chunking", "content_size"): "content_chunk_size",
    ("chunking", "content_overlap"): "content_chunk_overlap",
    ("ingest", "embed_on_ingest"): "embed_on_ingest",
}


class Settings(BaseModel):
    """Runtime configuration loaded from YAML file and environment variables."""

    db_path: Path = Field(default=Path.home() / ".ghostwriter" / "ghostwriter.db")
    native_vectors: bool = True
    embedding_backend: Literal["hashed", "openai"] = "hashed"
    embedding_model: str = "text-embedding-3-small"
    embedding_dim: int = Field(default=384, gt=0)
    embedding_max_chars: int = Field(default=8000, gt=0)
    embedding_timeout: float = Field(default=10.0, gt=0)
    embedding_api_key: str | None = None
    embedding_base_url: str | None = None
    cache_key: Literal["prefix", "sha256"] = "prefix"
    cache_max_entries: int | None = Field(default=None, gt=0)
    top_k: int = Field(default=4, ge=1)
    keyword_weight: float = Field(default=0.3, ge=0)
    vector_weight: float = Field(default=0.7, ge=0)
    style_chunk_size: int = 2000
    style_chunk_overlap: int = 300
    content_chunk_size: int = 1000
    content_chunk_overlap: int = 200
    embed_on_ingest: bool = True

    model_config = {
        "validate_assignment": True,
        "extra": "ignore",
    }

    @field_validator("db_path", mode="before")
    @classmethod
    def _expand_db_path(cls, value: Any) -> Path:
        if isinstance(value, Path):
            return value.expanduser()
        if isinstance(value, str):
            return Path(value).expanduser()
        raise TypeError("db_path must be a path or string")

    @field_validator("cache_max_entries", mode="before")
    @classmethod
    def _blank_means_unbounded(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().lower() in {"", "none", "0"}:
            return None
        if value == 0:
            return None
        return value

    @model_validator(mode="after")
    def _check_overlaps(self) -> "Settings":
        if self.style_chunk_overlap >= self.style_chunk_size:
            raise ValueError("style_chunk_overlap must be smaller than style_chunk_size")
        if self.content_chunk_overlap >= self.content_chunk_size:
            raise ValueError("content_chunk_overlap must be smaller than content_chunk_size")
        return self

    def chunking_for(self, doc_type: str) -> tuple[int, int]:
        """Return ``(chunk_size, overlap)`` for a document type."""
        if doc_type == "style":
            return self.style_chunk_size, self.style_chunk_overlap
        return self.content_chunk_size, self.content_chunk_overlap

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> "Settings":
        """Load YAML config and overlay env vars; fall back to defaults."""
        config_path = cls._resolve_config_path(path)
        data: dict[str, Any] = {}
        if config_path and config_path.exists():
            with config_path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
            data.update(_flatten_yaml(raw))
        data.update(_load_env_overrides())
        return cls(**data)

    @staticmethod
    def _resolve_config_path(path: Path | None) -> Path | None:
        if path is not None:
            return path.expanduser()
        env_path = os.environ.get(f"{ENV_PREFIX}CONFIG")
        if env_path:
            return Path(env_path).expanduser()
        resolved_default = DEFAULT_CONFIG_PATH.expanduser()
        return resolved_default if resolved_default.exists() else None


def _flatten_yaml(raw: Mapping[str, Any], prefix: tuple[str, ...] = ()) -> dict[str, Any]:
    """Flatten nested YAML configuration to Settings field names."""
    flat: dict[str, Any] = {}
    for key, value in raw.items():
        next_prefix = prefix + (key,)
        if isinstance(value, Mapping):
            flat.update(_flatten_yaml(value, prefix=next_prefix))
        else:
            mapped_key = _YAML_KEY_MAP.get(next_prefix)
            if mapped_key:
                flat[mapped_key] = value
            elif key in Settings.model_fields:
                flat[key] = value
    return flat


def _load_env_overrides() -> dict[str, Any]:
    """Map environment variables with GHW_ prefix into Settings fields."""
    overrides: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in Settings.model_fields:
            overrides[field_name] = value
    return overrides


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings accessor for dependency injection."""
    return Settings.from_yaml()


__all__ = ["Settings", "get_settings"]
