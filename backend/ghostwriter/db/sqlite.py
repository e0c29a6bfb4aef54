"""SQLite management utilities."""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Iterator, Sequence

from ghostwriter.utils.vectors import cosine_similarity, parse_embedding

DEFAULT_PRAGMAS = (
    "PRAGMA journal_mode=WAL;",
    "PRAGMA synchronous=NORMAL;",
    "PRAGMA foreign_keys=ON;",
    "PRAGMA temp_store=MEMORY;",
)

COSINE_DISTANCE_FN = "cosine_distance"


class SQLiteDatabase:
    """Thin wrapper around sqlite3 providing pragmatic defaults.

    One connection is shared across threads and serialized by a lock. With
    ``native_vectors`` the connection gets a ``cosine_distance(a, b)`` SQL
    function over the stored ``[f1,f2,...]`` text, so nearest-neighbour
    ordering can run inside a query.
    """

    def __init__(self, db_path: Path, read_only: bool = False, native_vectors: bool = True) -> None:
        self.db_path = db_path.expanduser()
        self.read_only = read_only
        self.native_vectors = native_vectors
        self._connection: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    def connect(self) -> sqlite3.Connection:
        with self._lock:
            if self._connection is None:
                if self.read_only:
                    uri = f"file:{self.db_path}?mode=ro"
                    self._connection = sqlite3.connect(uri, uri=True, check_same_thread=False)
                else:
                    self.db_path.parent.mkdir(parents=True, exist_ok=True)
                    self._connection = sqlite3.connect(self.db_path, check_same_thread=False)
                self._connection.row_factory = sqlite3.Row
                for pragma in DEFAULT_PRAGMAS:
                    self._connection.execute(pragma)
                if self.native_vectors:
                    self._connection.create_function(COSINE_DISTANCE_FN, 2, _cosine_distance, deterministic=True)
            return self._connection

    def close(self) -> None:
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

    def __enter__(self) -> "SQLiteDatabase":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()
        self.close()

    def commit(self) -> None:
        with self._lock:
            if self._connection is not None:
                self._connection.commit()

    def rollback(self) -> None:
        with self._lock:
            if self._connection is not None:
                self._connection.rollback()

    def executescript(self, script: str) -> None:
        with self._lock:
            self.connect().executescript(script)

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> sqlite3.Cursor:
        with self._lock:
            return self.connect().execute(sql, params or [])

    def executemany(self, sql: str, seq_of_params: Iterable[Sequence[Any]]) -> sqlite3.Cursor:
        with self._lock:
            return self.connect().executemany(sql, seq_of_params)

    def query(self, sql: str, params: Sequence[Any] | None = None) -> list[sqlite3.Row]:
        with self._lock:
            return self.connect().execute(sql, params or []).fetchall()

    def query_one(self, sql: str, params: Sequence[Any] | None = None) -> sqlite3.Row | None:
        with self._lock:
            return self.connect().execute(sql, params or []).fetchone()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        with self._lock:
            conn = self.connect()
            cursor = conn.cursor()
            try:
                yield cursor
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                cursor.close()

    def ensure_schema(self, schema_sql: str | None = None) -> None:
        if schema_sql is None:
            schema_path = Path(__file__).with_name("schema.sql")
            schema_sql = schema_path.read_text(encoding="utf-8")
        self.executescript(schema_sql)


@lru_cache(maxsize=16)
def _parse_query_vector(raw: str) -> tuple[float, ...] | None:
    vector = parse_embedding(raw)
    return tuple(vector) if vector is not None else None


def _cosine_distance(stored: str | None, query: str | None) -> float | None:
    """SQL function body; NULL for unusable or mismatched vectors."""
    if stored is None or query is None:
        return None
    query_vector = _parse_query_vector(query)
    stored_vector = parse_embedding(stored)
    if query_vector is None or stored_vector is None or len(stored_vector) != len(query_vector):
        return None
    return 1.0 - cosine_similarity(stored_vector, query_vector)


__all__ = ["SQLiteDatabase", "COSINE_DISTANCE_FN"]
