"""Vector math and the textual embedding format stored with chunks."""

from __future__ import annotations

import math
from typing import Any, Sequence

import orjson


def serialize_embedding(vector: Sequence[float]) -> str:
    """Render ``[0.1,-0.2,...]``: no spaces, shortest round-trip decimals."""
    return "[" + ",".join(repr(float(value)) for value in vector) + "]"


def parse_embedding(raw: Any) -> list[float] | None:
    """Parse a stored embedding; anything unusable comes back as ``None``."""
    if raw is None:
        return None
    if isinstance(raw, (list, tuple)):
        values = list(raw)
    else:
        try:
            values = orjson.loads(raw)
        except orjson.JSONDecodeError:
            return None
    if not isinstance(values, list) or not values:
        return None
    vector: list[float] = []
    for value in values:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        vector.append(float(value))
    return vector


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """``dot(a, b) / (|a| * |b|)``; 0.0 for empty, mismatched or zero-norm vectors."""
    if len(a) != len(b) or not a:
        return 0.0
    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


__all__ = ["serialize_embedding", "parse_embedding", "cosine_similarity"]
