"""Hashing utilities."""

from __future__ import annotations

import hashlib


def sha256_text(text: str) -> str:
    """Return hex digest of UTF-8 encoded text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def blake2b_slot(token: str, buckets: int) -> int:
    """Map a token onto one of ``buckets`` slots."""
    digest = hashlib.blake2b(token.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big") % buckets
