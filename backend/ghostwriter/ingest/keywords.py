"""Keyword extraction and query tokenization."""

from __future__ import annotations

import re
from collections import Counter

ACCENTED_LETTERS = "áéíóúàèìòùâêîôûãõç"

# ASCII word characters only; accented letters outside the list above are stripped
_STRIP_RE = re.compile(rf"[^A-Za-z0-9_\s{ACCENTED_LETTERS}]")

MAX_KEYWORDS = 10
MIN_KEYWORD_LENGTH = 4
MIN_QUERY_TOKEN_LENGTH = 3


def tokenize(text: str, min_length: int = 1) -> list[str]:
    """Lowercase, replace stray characters with spaces and split."""
    cleaned = _STRIP_RE.sub(" ", text.lower())
    return [token for token in cleaned.split() if len(token) >= min_length]


def extract_keywords(text: str, limit: int = MAX_KEYWORDS) -> list[str]:
    """Return the most frequent tokens longer than three characters.

    Ties keep first-seen order.
    """
    counts = Counter(tokenize(text, min_length=MIN_KEYWORD_LENGTH))
    return [word for word, _ in counts.most_common(limit)]


def query_tokens(query: str) -> list[str]:
    return tokenize(query, min_length=MIN_QUERY_TOKEN_LENGTH)


__all__ = ["tokenize", "extract_keywords", "query_tokens", "ACCENTED_LETTERS"]
