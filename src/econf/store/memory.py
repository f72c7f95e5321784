"""In-process document store.

Keeps every collection in a dict guarded by a re-entrant lock.  A
batch is applied against a staged copy of the touched documents and
only swapped in once every write has resolved, so a failing write
leaves the store exactly as it was.
"""

import copy
import threading
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple

from .base import DocumentStore, WriteOp, apply_write


class MemoryStore(DocumentStore):
    """Dictionary-backed store used for development and tests."""

    def __init__(self, initial: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None) -> None:
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = copy.deepcopy(initial) if initial else {}
        self._lock = threading.RLock()

    def _read(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            data = self._collections.get(collection, {}).get(doc_id)
            return copy.deepcopy(data) if data is not None else None

    def _scan(self, collection: str) -> Iterator[Tuple[str, Dict[str, Any]]]:
        with self._lock:
            items = copy.deepcopy(list(self._collections.get(collection, {}).items()))
        return iter(items)

    def _apply(self, ops: Sequence[WriteOp]) -> None:
        with self._lock:
            staged: Dict[Tuple[str, str], Optional[Dict[str, Any]]] = {}
            for op in ops:
                key = (op.collection, op.doc_id)
                current = staged[key] if key in staged else self._collections.get(op.collection, {}).get(op.doc_id)
                staged[key] = apply_write(copy.deepcopy(current), op)
            for (collection, doc_id), data in staged.items():
                docs = self._collections.setdefault(collection, {})
                if data is None:
                    docs.pop(doc_id, None)
                else:
                    docs[doc_id] = data

    def dump(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        """Deep copy of every collection, for inspection."""
        with self._lock:
            return copy.deepcopy(self._collections)
