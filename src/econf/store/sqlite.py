"""Persistent document store using SQLite.

Every document is one row of the ``documents`` table holding its JSON
body.  A batch runs inside a single ``BEGIN IMMEDIATE`` transaction:
the write lock is taken before the touched documents are read, so
array transforms resolve against the committed state even when several
connections (other processes included) share the same file, and either
every write lands or none does.
"""

import json
import sqlite3
import threading
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple

from .base import DocumentStore, StoreError, WriteOp, apply_write
from ..utils.logging import get_logger

logger = get_logger(__name__)


class SqliteStore(DocumentStore):
    """
    SQLite-backed document store.

    Collections are logical: all documents share one table keyed by
    ``(collection, id)``.  Queries scan the collection and filter in
    Python, which is adequate for the collection sizes this service
    handles.

    Args:
        db_path: Database file, created with its parent directory if missing.
        timeout: Seconds a writer waits for another connection's write
            lock before failing with ``StoreError``.
    """

    def __init__(self, db_path: Path, timeout: float = 5.0) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        # Autocommit mode; write transactions are opened explicitly in _apply
        self.conn = sqlite3.connect(
            str(self.db_path), timeout=timeout, isolation_level=None, check_same_thread=False
        )
        # Performance options
        self.conn.execute("PRAGMA journal_mode = WAL")
        self.conn.execute("PRAGMA synchronous = NORMAL")
        self._lock = threading.RLock()
        self._init_schema()

    def _init_schema(self) -> None:
        self.conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS documents (
                collection TEXT NOT NULL,
                id TEXT NOT NULL,
                data TEXT NOT NULL,
                PRIMARY KEY (collection, id)
            );

            CREATE INDEX IF NOT EXISTS idx_documents_collection ON documents(collection);
            """
        )

    def _fetch(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        cur = self.conn.execute(
            "SELECT data FROM documents WHERE collection = ? AND id = ?", (collection, doc_id)
        )
        row = cur.fetchone()
        return json.loads(row[0]) if row else None

    def _read(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            return self._fetch(collection, doc_id)

    def _scan(self, collection: str) -> Iterator[Tuple[str, Dict[str, Any]]]:
        with self._lock:
            rows = self.conn.execute(
                "SELECT id, data FROM documents WHERE collection = ? ORDER BY rowid", (collection,)
            ).fetchall()
        return ((doc_id, json.loads(data)) for doc_id, data in rows)

    def _write_staged(self, ops: Sequence[WriteOp]) -> None:
        staged: Dict[Tuple[str, str], Optional[Dict[str, Any]]] = {}
        for op in ops:
            key = (op.collection, op.doc_id)
            current = staged[key] if key in staged else self._fetch(op.collection, op.doc_id)
            staged[key] = apply_write(current, op)
        for (collection, doc_id), data in staged.items():
            if data is None:
                self.conn.execute(
                    "DELETE FROM documents WHERE collection = ? AND id = ?",
                    (collection, doc_id),
                )
            else:
                self.conn.execute(
                    """INSERT OR REPLACE INTO documents (collection, id, data)
                    VALUES (?, ?, ?)""",
                    (collection, doc_id, json.dumps(data)),
                )

    def _apply(self, ops: Sequence[WriteOp]) -> None:
        with self._lock:
            committed = False
            try:
                self.conn.execute("BEGIN IMMEDIATE")
                self._write_staged(ops)
                self.conn.execute("COMMIT")
                committed = True
            except sqlite3.Error as exc:
                logger.error(f"SQLite write failed: {exc}")
                raise StoreError(str(exc)) from exc
            finally:
                if not committed and self.conn.in_transaction:
                    self.conn.execute("ROLLBACK")

    def close(self) -> None:
        self.conn.close()
