from __future__ import annotations

import os
import pickle
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import duckdb

from .cache import CacheStore
from .config import Config


@dataclass(frozen=True)
class TableSchema:
    name: str
    ddl: str


ENTRIES = TableSchema(
    name="entries",
    ddl="""
    CREATE TABLE IF NOT EXISTS entries (
        cache_key TEXT PRIMARY KEY,
        value BLOB,
        last_updated TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );
    """,
)


def _resolve_db_path(
    db_path: str | os.PathLike[str] | None = None,
    config: Config | None = None,
) -> str:
    cfg = config or Config()
    candidate = db_path or os.environ.get(cfg.db_env, cfg.db_default)
    return str(Path(candidate).expanduser())


class DuckDbStore(CacheStore):
    """Persistent cache store keeping pickled results in a DuckDB file.

    Values must be picklable; ``set`` raises otherwise, which the
    interceptor reports through its failure hook.
    """

    def __init__(
        self,
        db_path: str | os.PathLike[str] | None = None,
        *,
        config: Config | None = None,
    ):
        self._config = config or Config()
        self.db_path = _resolve_db_path(db_path, self._config)
        self._conn: duckdb.DuckDBPyConnection | None = None

        self.initialize_db()

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            self._conn = duckdb.connect(database=self.db_path, read_only=False)
        return self._conn

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __call__(self, query: str, parameters: tuple = ()) -> duckdb.DuckDBPyRelation:
        params = parameters if parameters else None
        return self.conn.sql(query, params=params)

    def initialize_db(self):
        """Create the entries table if it doesn't exist."""
        self(ENTRIES.ddl)

    def get(self, key: str) -> Any | None:
        row = self("SELECT value FROM entries WHERE cache_key = ?;", (key,)).fetchone()
        if row is None or row[0] is None:
            return None
        return pickle.loads(bytes(row[0]))

    def set(self, key: str, value: Any) -> None:
        """Store value under key; an existing entry is replaced."""
        payload = pickle.dumps(value)
        query = """
            INSERT INTO entries (cache_key, value, last_updated)
            VALUES (?, ?, ?)
            ON CONFLICT (cache_key) DO UPDATE
            SET value = EXCLUDED.value,
                last_updated = EXCLUDED.last_updated;
            """
        self(query, (key, payload, datetime.now()))

    def keys(self, prefix: str | None = None) -> list[str]:
        if prefix:
            rows = self(
                "SELECT cache_key FROM entries WHERE starts_with(cache_key, ?) "
                "ORDER BY cache_key;",
                (prefix,),
            ).fetchall()
        else:
            rows = self("SELECT cache_key FROM entries ORDER BY cache_key;").fetchall()
        return [row[0] for row in rows]

    def count(self) -> int:
        row = self("SELECT COUNT(*) FROM entries;").fetchone()
        return int(row[0]) if row else 0

    def clear(self) -> int:
        removed = self.count()
        self("DELETE FROM entries;")
        return removed
