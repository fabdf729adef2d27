"""Term statistics resolvers.

The term statistics collection (term id, document frequency, idf per token)
is produced and maintained by an external indexing pipeline. This module only
reads it: a resolver answers ``lookup(token)`` with at most one record per
distinct token text, deterministically for a fixed snapshot.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager, nullcontext
import logging
import os
from pathlib import Path
import re
import sqlite3
import threading
from typing import Protocol, runtime_checkable

from bm25_svector.errors import TermSourceError
from bm25_svector.models import TermRecord
from bm25_svector.sqlite_pragmas import apply_read_pragmas


logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

DEFAULT_TERM_TABLE = "term_statistics"


@runtime_checkable
class TermStatisticsResolver(Protocol):
    """Exact-match lookup over a term statistics snapshot."""

    def lookup(self, token: str) -> TermRecord | None:  # pragma: no cover - interface definition
        ...


class MappingTermStatistics:
    """Resolver over an in-memory ``token -> TermRecord`` mapping."""

    def __init__(self, records: Mapping[str, TermRecord] | Iterable[TermRecord]) -> None:
        if isinstance(records, Mapping):
            self._records = dict(records)
        else:
            self._records = {record.raw_token: record for record in records}

    def lookup(self, token: str) -> TermRecord | None:
        return self._records.get(token)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, token: str) -> bool:
        return token in self._records


class SqliteTermStatistics:
    """Read-only resolver over a SQLite term statistics table.

    Expected layout (extra columns are ignored)::

        CREATE TABLE term_statistics (
            token TEXT PRIMARY KEY,
            term_id INTEGER NOT NULL,
            doc_frequency INTEGER NOT NULL,
            idf REAL NOT NULL
        ) WITHOUT ROWID;

    Each thread gets its own connection. Wrap the lookups of one synthesis
    call in ``snapshot()`` so they all read the same database state.
    """

    def __init__(
        self,
        db_path: str | os.PathLike[str],
        *,
        table: str = DEFAULT_TERM_TABLE,
        busy_timeout_ms: int = 30000,
    ) -> None:
        if not _IDENTIFIER_RE.match(table):
            raise TermSourceError(f"Invalid term statistics table name: {table!r}")
        self.db_path = Path(db_path)
        if not self.db_path.is_file():
            raise TermSourceError(f"Term statistics database not found: {self.db_path}")
        self.table = table
        self.busy_timeout_ms = busy_timeout_ms
        self._query = f"SELECT term_id, doc_frequency, idf FROM {table} WHERE token = ?"  # noqa: S608
        self._local = threading.local()
        self._connections: list[sqlite3.Connection] = []
        self._connections_lock = threading.Lock()
        self._check_table()

    def __enter__(self) -> SqliteTermStatistics:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _connection(self) -> sqlite3.Connection:
        conn = getattr(self._local, "connection", None)
        if conn is None:
            conn = self._create_connection()
            self._local.connection = conn
            self._local.snapshot_depth = 0
            with self._connections_lock:
                self._connections.append(conn)
        return conn

    def _create_connection(self) -> sqlite3.Connection:
        uri = f"{self.db_path.resolve().as_uri()}?mode=ro"
        try:
            conn = sqlite3.connect(uri, uri=True, check_same_thread=False, isolation_level=None)
            apply_read_pragmas(conn, busy_timeout_ms=self.busy_timeout_ms)
        except sqlite3.Error as exc:
            raise TermSourceError(f"Cannot open term statistics database {self.db_path}: {exc}") from exc
        return conn

    def _check_table(self) -> None:
        try:
            row = (
                self._connection()
                .execute(
                    "SELECT 1 FROM sqlite_master WHERE type IN ('table', 'view') AND name = ?",
                    (self.table,),
                )
                .fetchone()
            )
        except sqlite3.Error as exc:
            raise TermSourceError(f"Cannot read term statistics database {self.db_path}: {exc}") from exc
        if row is None:
            raise TermSourceError(f"Table '{self.table}' not found in {self.db_path}")

    @contextmanager
    def snapshot(self) -> Iterator[SqliteTermStatistics]:
        """Run the enclosed lookups inside one read transaction (re-entrant per thread)."""
        conn = self._connection()
        if self._local.snapshot_depth:
            self._local.snapshot_depth += 1
            try:
                yield self
            finally:
                self._local.snapshot_depth -= 1
            return

        conn.execute("BEGIN")
        self._local.snapshot_depth = 1
        try:
            yield self
        finally:
            self._local.snapshot_depth = 0
            conn.execute("COMMIT")

    def lookup(self, token: str) -> TermRecord | None:
        try:
            row = self._connection().execute(self._query, (token,)).fetchone()
        except sqlite3.Error as exc:
            raise TermSourceError(f"Term lookup failed in {self.db_path}: {exc}") from exc
        if row is None:
            return None
        term_id, doc_frequency, idf = row
        return TermRecord(term_id=term_id, raw_token=token, idf=idf, doc_frequency=int(doc_frequency or 0))

    def close(self) -> None:
        """Close every connection opened by any thread."""
        with self._connections_lock:
            connections = list(self._connections)
            self._connections.clear()
        for conn in connections:
            try:
                conn.close()
            except sqlite3.Error:
                logger.debug("Ignoring error while closing %s", self.db_path, exc_info=True)
        self._local = threading.local()


TermSourceHandle = TermStatisticsResolver | str | os.PathLike


@contextmanager
def open_term_source(
    handle: TermSourceHandle,
    *,
    table: str | None = None,
    busy_timeout_ms: int | None = None,
) -> Iterator[TermStatisticsResolver]:
    """Yield a resolver for ``handle`` scoped to one consistent snapshot.

    Resolver objects are used as given (inside their ``snapshot()`` when they
    provide one). A filesystem path opens a ``SqliteTermStatistics`` that is
    closed again when the block exits.
    """
    if isinstance(handle, (str, os.PathLike)):
        if table is None or busy_timeout_ms is None:
            from bm25_svector.config import get_settings

            settings = get_settings()
            table = table or settings.term_table
            busy_timeout_ms = busy_timeout_ms if busy_timeout_ms is not None else settings.sqlite_busy_timeout_ms
        with SqliteTermStatistics(handle, table=table, busy_timeout_ms=busy_timeout_ms) as source:
            with source.snapshot():
                yield source
        return

    if not isinstance(handle, TermStatisticsResolver):
        raise TermSourceError(f"Unsupported term source handle: {type(handle).__name__}")

    snapshot = getattr(handle, "snapshot", None)
    with snapshot() if callable(snapshot) else nullcontext(handle):
        yield handle
