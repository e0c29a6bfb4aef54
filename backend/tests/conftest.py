"""Test fixtures for the retrieval core."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from ghostwriter.core.config import Settings  # noqa: E402
from ghostwriter.db.sqlite import SQLiteDatabase  # noqa: E402
from ghostwriter.db.store import ChunkStore  # noqa: E402


@pytest.fixture(autouse=True)
def reset_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset cached dependencies and environment between tests."""
    monkeypatch.setenv("GHW_DB_PATH", str(tmp_path / "ghostwriter.db"))
    monkeypatch.setenv("GHW_EMBEDDING_BACKEND", "hashed")
    monkeypatch.delenv("GHW_CONFIG", raising=False)

    from ghostwriter.api import dependencies as deps

    deps.reset_dependencies()
    yield
    deps.reset_dependencies()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(db_path=tmp_path / "unit.db")


@pytest.fixture
def database(tmp_path: Path) -> SQLiteDatabase:
    db = SQLiteDatabase(tmp_path / "store.db")
    db.ensure_schema()
    yield db
    db.close()


@pytest.fixture
def plain_database(tmp_path: Path) -> SQLiteDatabase:
    """A database without the in-SQL distance function."""
    db = SQLiteDatabase(tmp_path / "plain.db", native_vectors=False)
    db.ensure_schema()
    yield db
    db.close()


@pytest.fixture
def store(database: SQLiteDatabase) -> ChunkStore:
    return ChunkStore(database)


@pytest.fixture
def plain_store(plain_database: SQLiteDatabase) -> ChunkStore:
    return ChunkStore(plain_database)


@pytest.fixture(scope="session")
def prose() -> str:
    """Roughly 2,300 characters without paragraph or sentence breaks."""
    words = "lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod tempor "
    return (words * 40)[:2300]
