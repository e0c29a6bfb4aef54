"""Tests for chunk persistence."""

import sqlite3

import pytest

from ghostwriter.db.store import CandidateFilter, ChunkStore
from ghostwriter.ingest.types import ChunkPayload
from ghostwriter.utils.vectors import cosine_similarity, parse_embedding, serialize_embedding


def _payloads(document_id: str, *contents: str, embeddings=None) -> list[ChunkPayload]:
    embeddings = embeddings or [None] * len(contents)
    return [
        ChunkPayload(
            id=f"{document_id}-{idx}",
            document_id=document_id,
            chunk_index=idx,
            content=content,
            keywords=[content.split()[0]],
            embedding=embedding,
        )
        for idx, (content, embedding) in enumerate(zip(contents, embeddings))
    ]


def test_embedding_text_format() -> None:
    assert serialize_embedding([0.123, -0.45, 1]) == "[0.123,-0.45,1.0]"
    assert parse_embedding("[0.123,-0.45,1.0]") == [0.123, -0.45, 1.0]
    assert parse_embedding(serialize_embedding([1e-7, 2.5])) == [1e-7, 2.5]


@pytest.mark.parametrize("raw", [None, "", "not json", "{}", "[]", '["a", 1]', "[true]", 42])
def test_unusable_embeddings_parse_to_none(raw) -> None:
    assert parse_embedding(raw) is None


def test_cosine_similarity_edge_cases() -> None:
    assert cosine_similarity([1.0, 0.0], [2.0, 0.0]) == pytest.approx(1.0)
    assert cosine_similarity([1.0, 0.0], [0.0, 3.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0
    assert cosine_similarity([1.0], [1.0, 0.0]) == 0.0
    assert cosine_similarity([], []) == 0.0


def test_candidates_filtered_by_type_project_and_active(store: ChunkStore) -> None:
    style = store.insert_document("style", _payloads("s1", "style voice sample"), document_id="s1", project_id="p1")
    store.insert_document("content", _payloads("c1", "content fact one", "content fact two"), document_id="c1", project_id="p1")
    store.insert_document("content", _payloads("c2", "other project fact"), document_id="c2", project_id="p2")
    assert style.chunk_count == 1

    content = store.list_candidates(CandidateFilter(doc_type="content"))
    assert [chunk.id for chunk in content] == ["c1-0", "c1-1", "c2-0"]
    assert content[0].keywords == ["content"]

    scoped = store.list_candidates(CandidateFilter(doc_type="content", project_ids=["p2"]))
    assert [chunk.id for chunk in scoped] == ["c2-0"]

    assert store.set_document_active("c1", False)
    active = store.list_candidates(CandidateFilter(doc_type="content"))
    assert [chunk.id for chunk in active] == ["c2-0"]
    everything = store.list_candidates(CandidateFilter(doc_type="content", active_only=False))
    assert len(everything) == 3

    assert store.list_candidates(CandidateFilter(project_ids=[])) == []


def test_embedding_is_written_once(store: ChunkStore) -> None:
    store.insert_document("content", _payloads("d", "first chunk text"), document_id="d")
    assert [chunk.id for chunk in store.list_unembedded()] == ["d-0"]
    assert store.set_embedding("d-0", [0.1, 0.2])
    assert not store.set_embedding("d-0", [0.9, 0.9])
    assert store.get_chunks(["d-0"])[0].embedding == "[0.1,0.2]"
    assert store.list_unembedded() == []
    with pytest.raises(ValueError):
        store.set_embedding("d-0", [])


def test_get_chunks_keeps_requested_order(store: ChunkStore) -> None:
    store.insert_document("content", _payloads("d", "alpha text", "beta text"), document_id="d", filename="notes.txt")
    chunks = store.get_chunks(["d-1", "missing", "d-0"])
    assert [chunk.id for chunk in chunks] == ["d-1", "d-0"]
    assert chunks[0].doc_type == "content"
    assert chunks[0].filename == "notes.txt"
    assert store.get_chunks([]) == []


def test_nearest_chunks_orders_by_distance(store: ChunkStore) -> None:
    store.insert_document(
        "content",
        _payloads("d", "same", "diagonal", "orthogonal", "unparsable", embeddings=[[1.0, 0.0], [1.0, 1.0], [0.0, 1.0], None]),
        document_id="d",
    )
    store.db.execute("UPDATE chunks SET embedding = 'garbage' WHERE id = 'd-3'")
    store.db.commit()
    rows = store.nearest_chunks([1.0, 0.0], CandidateFilter(doc_type="content"), limit=2)
    assert [row[0] for row in rows] == ["d-0", "d-1"]
    assert rows[0][2] == pytest.approx(0.0)
    assert rows[1][2] == pytest.approx(1.0 - 0.5**0.5)


def test_nearest_chunks_requires_the_sql_function(plain_store: ChunkStore) -> None:
    plain_store.insert_document("content", _payloads("d", "same", embeddings=[[1.0, 0.0]]), document_id="d")
    assert not plain_store.supports_native_vectors
    with pytest.raises(sqlite3.OperationalError):
        plain_store.nearest_chunks([1.0, 0.0], CandidateFilter(), limit=1)
    assert list(plain_store.iter_embedded(CandidateFilter())) == [("d-0", "same", "[1.0,0.0]")]


def test_deleting_a_document_removes_its_chunks(store: ChunkStore) -> None:
    store.insert_document("content", _payloads("d", "one", "two"), document_id="d")
    assert store.count_chunks() == 2
    assert store.delete_document("d")
    assert store.count_chunks() == 0
    assert not store.delete_document("d")
