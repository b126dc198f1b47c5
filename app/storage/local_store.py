from __future__ import annotations

import json
import logging
import os
import sqlite3
import threading

from pydantic import ValidationError as PydanticValidationError

from app.core.errors import StoreError
from app.schemas.analysis import AnalysisResult, StoredAnalysis
from app.storage.types import AnalysisContext, ensure_stored

logger = logging.getLogger(__name__)

HISTORY_STORAGE_KEY = "resumeAnalysisHistory"


class LocalStorage:
    """Durable key-value storage partitioned by namespace (one per browser session)."""

    def __init__(self, db_path: str):
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self.lock = threading.Lock()

    def _get_connection(self) -> sqlite3.Connection:
        if self._conn is not None:
            return self._conn

        if self._db_path != ":memory:":
            directory = os.path.dirname(self._db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

        conn = sqlite3.connect(
            self._db_path,
            check_same_thread=False,
            timeout=5,
            isolation_level=None,
        )
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA busy_timeout=5000;")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS local_storage (
                namespace TEXT NOT NULL,
                key TEXT NOT NULL,
                value TEXT NOT NULL,
                PRIMARY KEY (namespace, key)
            );
            """
        )
        self._conn = conn
        return conn

    def get_item(self, namespace: str, key: str) -> str | None:
        try:
            cur = self._get_connection().execute(
                "SELECT value FROM local_storage WHERE namespace = ? AND key = ?",
                (namespace, key),
            )
            row = cur.fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Local storage read failed: {exc}") from exc
        return row[0] if row else None

    def set_item(self, namespace: str, key: str, value: str) -> None:
        try:
            self._get_connection().execute(
                """
                INSERT INTO local_storage (namespace, key, value) VALUES (?, ?, ?)
                ON CONFLICT (namespace, key) DO UPDATE SET value = excluded.value
                """,
                (namespace, key, value),
            )
        except sqlite3.Error as exc:
            raise StoreError(f"Local storage write failed: {exc}") from exc

    def remove_item(self, namespace: str, key: str) -> None:
        try:
            self._get_connection().execute(
                "DELETE FROM local_storage WHERE namespace = ? AND key = ?",
                (namespace, key),
            )
        except sqlite3.Error as exc:
            raise StoreError(f"Local storage delete failed: {exc}") from exc

    def close(self) -> None:
        with self.lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None


class LocalStore:
    """History kept as one JSON array under ``resumeAnalysisHistory``.

    Every write replaces the whole collection. Read-modify-write runs under the
    storage lock with no await in between.
    """

    def __init__(self, storage: LocalStorage, namespace: str = "default", max_records: int = 100):
        self._storage = storage
        self._namespace = namespace
        self._max_records = max(1, max_records)

    def _read(self) -> list[StoredAnalysis]:
        raw = self._storage.get_item(self._namespace, HISTORY_STORAGE_KEY)
        if not raw:
            return []
        try:
            items = json.loads(raw)
            if not isinstance(items, list):
                raise ValueError("history entry is not a list")
            return [StoredAnalysis.model_validate(item) for item in items]
        except (ValueError, TypeError, PydanticValidationError) as exc:
            logger.warning("local_history_corrupt namespace=%s: %s", self._namespace, exc)
            self._storage.remove_item(self._namespace, HISTORY_STORAGE_KEY)
            return []

    def _write(self, records: list[StoredAnalysis]) -> None:
        payload = json.dumps(
            [record.model_dump(mode="json", by_alias=True) for record in records],
            ensure_ascii=False,
        )
        self._storage.set_item(self._namespace, HISTORY_STORAGE_KEY, payload)

    async def save(
        self,
        record: AnalysisResult | StoredAnalysis,
        scope: str | None = None,
        *,
        context: AnalysisContext | None = None,
    ) -> StoredAnalysis:
        stored = ensure_stored(record)
        with self._storage.lock:
            records = [item for item in self._read() if item.id != stored.id]
            records.insert(0, stored)
            self._write(records[: self._max_records])
        return stored

    async def list(self, scope: str | None = None) -> list[StoredAnalysis]:
        with self._storage.lock:
            return self._read()

    async def delete(self, record_id: str, scope: str | None = None) -> bool:
        with self._storage.lock:
            records = self._read()
            remaining = [item for item in records if item.id != record_id]
            if len(remaining) == len(records):
                return False
            self._write(remaining)
        return True

    async def clear(self, scope: str | None = None) -> None:
        with self._storage.lock:
            self._storage.remove_item(self._namespace, HISTORY_STORAGE_KEY)
