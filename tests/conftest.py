"""Shared test fixtures and configuration."""

import os
from pathlib import Path
import sqlite3

import pytest

from bm25_svector.config import get_settings
from bm25_svector.models import TermRecord
from bm25_svector.terms import MappingTermStatistics


TEST_ENV = {
    "SVECTOR_LOG_LEVEL": "info",
    "SVECTOR_LOG_JSON": "true",
    "SVECTOR_DEFAULT_B": "0.75",
    "SVECTOR_DEFAULT_K1": "1.2",
    "SVECTOR_DEFAULT_STYLE": "pgvecto.rs",
    "SVECTOR_DEFAULT_TOKENIZER": "whitespace",
    "SVECTOR_HF_REVISION": "main",
    "SVECTOR_TERM_TABLE": "term_statistics",
    "SVECTOR_SQLITE_BUSY_TIMEOUT_MS": "5000",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value


# token, term_id, doc_frequency, idf
SAMPLE_TERMS = [
    ("i", 3, 40, 0.5),
    ("have", 7, 12, 1.25),
    ("an", 11, 35, 0.75),
    ("apple", 2, 3, 2.5),
    ("pear", 19, 1, 3.0),
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Pin SVECTOR_* settings and drop the cached settings instance around each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def term_records() -> list[TermRecord]:
    return [
        TermRecord(term_id=term_id, raw_token=token, idf=idf, doc_frequency=df)
        for token, term_id, df, idf in SAMPLE_TERMS
    ]


@pytest.fixture
def term_stats(term_records) -> MappingTermStatistics:
    return MappingTermStatistics(term_records)


def create_term_db(path: Path, rows=SAMPLE_TERMS, table: str = "term_statistics") -> Path:
    """Write a term statistics table the way the indexing pipeline lays it out."""
    conn = sqlite3.connect(path)
    try:
        conn.execute(
            f"CREATE TABLE {table} ("
            "token TEXT PRIMARY KEY, term_id INTEGER NOT NULL, "
            "doc_frequency INTEGER NOT NULL, idf REAL NOT NULL) WITHOUT ROWID"
        )
        conn.executemany(
            f"INSERT INTO {table} (token, term_id, doc_frequency, idf) VALUES (?, ?, ?, ?)",
            [(token, term_id, df, idf) for token, term_id, df, idf in rows],
        )
        conn.commit()
    finally:
        conn.close()
    return path


@pytest.fixture
def make_term_db(tmp_path):
    """Factory writing a term statistics database under tmp_path."""

    def _make(rows=SAMPLE_TERMS, table: str = "term_statistics", name: str = "terms.sqlite") -> Path:
        return create_term_db(tmp_path / name, rows=rows, table=table)

    return _make


@pytest.fixture
def term_db(make_term_db) -> Path:
    return make_term_db()
