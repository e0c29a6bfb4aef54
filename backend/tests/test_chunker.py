"""Tests for chunker."""

import pytest

from ghostwriter.core.errors import InvalidChunkingParameters
from ghostwriter.ingest.chunker import MIN_CHUNK_CHARS, build_chunk_payloads, chunk_text


def test_plain_prose_yields_three_windows(prose: str) -> None:
    chunks = chunk_text(prose, chunk_size=1000, overlap=200)
    assert len(chunks) == 3
    assert chunks[0] == prose[0:1000].strip()
    assert chunks[1] == prose[800:1800].strip()
    assert chunks[2] == prose[1600:].strip()
    assert all(len(chunk) >= 800 for chunk in chunks[:2])
    assert all(len(chunk) > MIN_CHUNK_CHARS for chunk in chunks)


def test_cut_moves_to_paragraph_break() -> None:
    head = "word " * 190
    text = head + "\n\n" + "more " * 300
    chunks = chunk_text(text, chunk_size=1000, overlap=200)
    assert chunks[0] == head.strip()


def test_cut_moves_to_sentence_break() -> None:
    head = "alpha " * 160 + "end. "
    text = head + "beta " * 300
    chunks = chunk_text(text, chunk_size=1000, overlap=200)
    assert chunks[0].endswith("end.")
    assert chunks[0] == head.strip()


def test_distant_sentence_break_is_ignored() -> None:
    text = "gamma " * 176 + "stop. " + "delta " * 200
    assert text.index(". ") > 1050
    chunks = chunk_text(text, chunk_size=1000, overlap=200)
    assert chunks[0] == text[:1000].strip()


def test_paragraph_break_wins_over_sentence_break() -> None:
    text = "one " * 230 + "two. " + "three " * 10 + "\n\n" + "four " * 200
    paragraph = text.index("\n\n")
    chunks = chunk_text(text, chunk_size=1000, overlap=200)
    assert chunks[0] == text[: paragraph + 2].strip()


@pytest.mark.parametrize("text", ["", "   ", "\n\n\t  \n"])
def test_blank_text_yields_nothing(text: str) -> None:
    assert chunk_text(text, 1000, 200) == []


def test_short_fragments_are_dropped() -> None:
    assert chunk_text("A fifty character sentence is much too short.", 1000, 200) == []
    exactly_fifty = "x" * 50
    assert chunk_text(exactly_fifty, 1000, 200) == []
    assert chunk_text("x" * 51, 1000, 200) == ["x" * 51]


@pytest.mark.parametrize(
    ("chunk_size", "overlap"),
    [(0, 0), (-10, 0), (100, 100), (100, 150), (100, -1)],
)
def test_invalid_window_is_rejected(chunk_size: int, overlap: int) -> None:
    with pytest.raises(InvalidChunkingParameters):
        chunk_text("some text " * 20, chunk_size, overlap)
    with pytest.raises(ValueError):
        chunk_text("some text " * 20, chunk_size, overlap)


def test_chunking_is_deterministic() -> None:
    text = ("Paragraph with a sentence. Another sentence follows here.\n\n" * 40).strip()
    assert chunk_text(text, 300, 60) == chunk_text(text, 300, 60)


def test_chunks_walk_forward_through_the_text() -> None:
    text = ("First sentence of a paragraph. Second sentence is a bit longer than the first.\n\n" * 30).strip()
    chunks = chunk_text(text, 400, 80)
    assert chunks
    cursor = -1
    for chunk in chunks:
        assert len(chunk) > MIN_CHUNK_CHARS
        position = text.find(chunk, cursor + 1)
        assert position > cursor
        cursor = position
    assert text.endswith(chunks[-1])


def test_small_windows_still_terminate() -> None:
    text = "a. " * 200
    chunks = chunk_text(text, chunk_size=60, overlap=50)
    assert all(len(chunk) > MIN_CHUNK_CHARS for chunk in chunks)


def test_build_chunk_payloads_numbers_and_tags_chunks() -> None:
    payloads = build_chunk_payloads("doc_1", ["gato gato telhado " * 5, "cachorro quintal " * 5])
    assert [payload.chunk_index for payload in payloads] == [0, 1]
    assert all(payload.document_id == "doc_1" for payload in payloads)
    assert len({payload.id for payload in payloads}) == 2
    assert payloads[0].keywords[:2] == ["gato", "telhado"]
    assert payloads[1].embedding is None
