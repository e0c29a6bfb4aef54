"""Chunk persistence on top of :class:`SQLiteDatabase`."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any, Iterator, Sequence

import orjson

from ghostwriter.db.sqlite import COSINE_DISTANCE_FN, SQLiteDatabase
from ghostwriter.ingest.types import ChunkPayload
from ghostwriter.models.entities import Document, StoredChunk
from ghostwriter.utils.ids import new_id
from ghostwriter.utils.time import now_ms
from ghostwriter.utils.vectors import serialize_embedding

_CHUNK_COLUMNS = """
  chunks.id,
  chunks.document_id,
  chunks.chunk_index,
  chunks.content,
  chunks.keywords,
  chunks.embedding,
  documents.type AS doc_type,
  documents.filename
"""


@dataclass(slots=True)
class CandidateFilter:
    """Scope of chunks eligible for ranking."""

    doc_type: str | None = None
    project_ids: Sequence[str] | None = None
    chunk_ids: Sequence[str] | None = None
    active_only: bool = True

    def where_clause(self) -> tuple[str, list[Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        if self.active_only:
            clauses.append("documents.is_active = 1")
        if self.doc_type is not None:
            clauses.append("documents.type = ?")
            params.append(self.doc_type)
        if self.project_ids is not None:
            clauses.append(f"documents.project_id IN ({_placeholders(self.project_ids)})")
            params.extend(self.project_ids)
        if self.chunk_ids is not None:
            clauses.append(f"chunks.id IN ({_placeholders(self.chunk_ids)})")
            params.extend(self.chunk_ids)
        return (" AND ".join(clauses) or "1 = 1"), params


class ChunkStore:
    """Reads and writes documents, chunks and their embeddings."""

    def __init__(self, db: SQLiteDatabase) -> None:
        self.db = db

    @property
    def supports_native_vectors(self) -> bool:
        return self.db.native_vectors

    def insert_document(
        self,
        doc_type: str,
        chunks: Sequence[ChunkPayload],
        *,
        document_id: str | None = None,
        project_id: str | None = None,
        user_id: str | None = None,
        filename: str | None = None,
    ) -> Document:
        """Write a document and all of its chunks in one transaction."""
        document_id = document_id or new_id("doc")
        now = now_ms()
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                INSERT INTO documents (id, type, project_id, user_id, filename, is_active, chunk_count, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, 1, ?, ?, ?)
                """,
                [document_id, doc_type, project_id, user_id, filename, len(chunks), now, now],
            )
            cursor.executemany(
                """
                INSERT INTO chunks (id, document_id, chunk_index, content, keywords, embedding, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        chunk.id,
                        document_id,
                        chunk.chunk_index,
                        chunk.content,
                        orjson.dumps(chunk.keywords).decode("utf-8"),
                        serialize_embedding(chunk.embedding) if chunk.embedding else None,
                        now,
                    )
                    for chunk in chunks
                ],
            )
        return Document(
            id=document_id,
            type=doc_type,
            project_id=project_id,
            user_id=user_id,
            filename=filename,
            is_active=True,
            chunk_count=len(chunks),
            created_at=now,
        )

    def get_chunks(self, chunk_ids: Sequence[str]) -> list[StoredChunk]:
        """Fetch chunks by id, in the order requested; unknown ids are skipped."""
        if not chunk_ids:
            return []
        rows = self.db.query(
            f"""
            SELECT {_CHUNK_COLUMNS}
            FROM chunks
            JOIN documents ON documents.id = chunks.document_id
            WHERE chunks.id IN ({_placeholders(chunk_ids)})
            """,
            list(chunk_ids),
        )
        by_id = {row["id"]: _row_to_chunk(row) for row in rows}
        return [by_id[chunk_id] for chunk_id in chunk_ids if chunk_id in by_id]

    def list_candidates(self, scope: CandidateFilter) -> list[StoredChunk]:
        where, params = scope.where_clause()
        rows = self.db.query(
            f"""
            SELECT {_CHUNK_COLUMNS}
            FROM chunks
            JOIN documents ON documents.id = chunks.document_id
            WHERE {where}
            ORDER BY documents.created_at, chunks.document_id, chunks.chunk_index
            """,
            params,
        )
        return [_row_to_chunk(row) for row in rows]

    def list_unembedded(self, limit: int | None = None) -> list[StoredChunk]:
        sql = f"""
            SELECT {_CHUNK_COLUMNS}
            FROM chunks
            JOIN documents ON documents.id = chunks.document_id
            WHERE chunks.embedding IS NULL
            ORDER BY chunks.created_at, chunks.chunk_index
        """
        params: list[Any] = []
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        return [_row_to_chunk(row) for row in self.db.query(sql, params)]

    def set_embedding(self, chunk_id: str, vector: Sequence[float]) -> bool:
        """Store a chunk's embedding once; returns False if it already had one."""
        if not vector:
            raise ValueError("refusing to store an empty embedding")
        with self.db.transaction() as cursor:
            cursor.execute(
                "UPDATE chunks SET embedding = ? WHERE id = ? AND embedding IS NULL",
                [serialize_embedding(vector), chunk_id],
            )
            return cursor.rowcount > 0

    def iter_embedded(self, scope: CandidateFilter) -> Iterator[tuple[str, str, str]]:
        """Yield ``(id, content, raw_embedding)`` for in-scope chunks that carry a vector."""
        where, params = scope.where_clause()
        rows = self.db.query(
            f"""
            SELECT chunks.id, chunks.content, chunks.embedding
            FROM chunks
            JOIN documents ON documents.id = chunks.document_id
            WHERE chunks.embedding IS NOT NULL AND {where}
            """,
            params,
        )
        for row in rows:
            yield row["id"], row["content"], row["embedding"]

    def nearest_chunks(
        self,
        vector: Sequence[float],
        scope: CandidateFilter,
        limit: int,
    ) -> list[tuple[str, str, float]]:
        """Order in-scope chunks by cosine distance inside SQLite.

        Raises ``sqlite3.OperationalError`` when the connection has no
        distance function; callers fall back to scanning.
        """
        if not self.supports_native_vectors:
            raise sqlite3.OperationalError(f"no such function: {COSINE_DISTANCE_FN}")
        where, params = scope.where_clause()
        rows = self.db.query(
            f"""
            SELECT id, content, distance FROM (
              SELECT chunks.id AS id, chunks.content AS content,
                     {COSINE_DISTANCE_FN}(chunks.embedding, ?) AS distance
              FROM chunks
              JOIN documents ON documents.id = chunks.document_id
              WHERE chunks.embedding IS NOT NULL AND {where}
            )
            WHERE distance IS NOT NULL
            ORDER BY distance ASC
            LIMIT ?
            """,
            [serialize_embedding(vector), *params, limit],
        )
        return [(row["id"], row["content"], float(row["distance"])) for row in rows]

    def set_document_active(self, document_id: str, active: bool) -> bool:
        with self.db.transaction() as cursor:
            cursor.execute(
                "UPDATE documents SET is_active = ?, updated_at = ? WHERE id = ?",
                [int(active), now_ms(), document_id],
            )
            return cursor.rowcount > 0

    def delete_document(self, document_id: str) -> bool:
        with self.db.transaction() as cursor:
            cursor.execute("DELETE FROM documents WHERE id = ?", [document_id])
            return cursor.rowcount > 0

    def count_chunks(self) -> int:
        row = self.db.query_one("SELECT COUNT(*) AS count FROM chunks")
        return int(row["count"]) if row else 0


def _placeholders(values: Sequence[Any]) -> str:
    return ",".join("?" for _ in values) or "NULL"


def _row_to_chunk(row: sqlite3.Row) -> StoredChunk:
    return StoredChunk(
        id=row["id"],
        document_id=row["document_id"],
        chunk_index=row["chunk_index"],
        content=row["content"],
        keywords=_load_keywords(row["keywords"]),
        embedding=row["embedding"],
        doc_type=row["doc_type"],
        filename=row["filename"],
    )


def _load_keywords(raw: str | None) -> list[str]:
    if not raw:
        return []
    try:
        value = orjson.loads(raw)
    except orjson.JSONDecodeError:
        return []
    return [str(item) for item in value] if isinstance(value, list) else []


__all__ = ["ChunkStore", "CandidateFilter"]
