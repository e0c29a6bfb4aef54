"""Retrieval components."""

from .hybrid import hybrid_search, score_vectors
from .keyword import keyword_search
from .search import SearchService
from .vector import Degraded, VectorScores, VectorSearcher

__all__ = [
    "hybrid_search",
    "score_vectors",
    "keyword_search",
    "SearchService",
    "VectorSearcher",
    "VectorScores",
    "Degraded",
]
