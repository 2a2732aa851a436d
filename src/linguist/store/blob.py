from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol

from ..errors import StoreUnavailable


class BlobStore(Protocol):
    """Key-value blob persistence. Synchronous from the engine's view."""

    def load(self, key: str) -> Optional[str]:
        ...

    def save(self, key: str, blob: str) -> None:
        ...


class MemoryBlobStore:
    """Process-local blob store used by tests and `:memory:` deployments."""

    def __init__(self) -> None:
        self._blobs: dict[str, str] = {}

    def load(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    def save(self, key: str, blob: str) -> None:
        self._blobs[key] = blob


class SQLiteBlobStore:
    """SQLite-backed blob store: one row per key.

    - 書き込みは行単位の置換（INSERT OR REPLACE）なので部分更新は発生しない
    - sqlite3 の例外は StoreUnavailable に包んで呼び出し側へ伝える
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._ensure_dirs()
        self._init_db()

    # --- low-level helpers ---
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=10.0, isolation_level=None, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        with conn:
            conn.execute("PRAGMA journal_mode=WAL;")
        return conn

    def _ensure_dirs(self) -> None:
        p = Path(self.db_path)
        if p.parent and not p.parent.exists():
            try:
                p.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StoreUnavailable("*", str(exc)) from exc

    def _init_db(self) -> None:
        try:
            conn = self._connect()
        except sqlite3.Error as exc:
            raise StoreUnavailable("*", str(exc)) from exc
        try:
            with conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS blobs (
                        key TEXT PRIMARY KEY,
                        data TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    );
                    """
                )
        finally:
            conn.close()

    # --- public API ---
    def load(self, key: str) -> Optional[str]:
        try:
            conn = self._connect()
            try:
                row = conn.execute("SELECT data FROM blobs WHERE key = ?;", (key,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StoreUnavailable(key, str(exc)) from exc
        if row is None:
            return None
        return str(row["data"])

    def save(self, key: str, blob: str) -> None:
        now = datetime.now(timezone.utc).isoformat()
        try:
            conn = self._connect()
            try:
                with conn:
                    conn.execute(
                        "INSERT OR REPLACE INTO blobs(key, data, updated_at) VALUES (?, ?, ?);",
                        (key, blob, now),
                    )
            finally:
                conn.close()
        except sqlite3.Error as exc:
            raise StoreUnavailable(key, str(exc)) from exc
