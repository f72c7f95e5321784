"""Base classes and interfaces for document store adapters.

A document store holds named collections of JSON-like documents keyed
by string IDs.  Adapters implement three primitives (read one
document, scan a collection, apply a list of writes atomically) and
inherit the query, merge and batch semantics defined here, so every
backend resolves ``ArrayUnion``/``ArrayRemove`` and merges the same way.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..core.ids import generate_id

# Maximum number of values accepted by an ``in`` query.
MAX_IN_VALUES = 10

QUERY_OPERATORS = ("==", "in", "array_contains")


class StoreError(Exception):
    """Raised when the backing store cannot complete an operation."""


class DocumentNotFound(StoreError):
    """Raised when an update targets a document that does not exist."""


class _ArraySentinel:
    """Array transform resolved against the stored value at write time."""

    def __init__(self, *values: Any) -> None:
        self.values: Tuple[Any, ...] = tuple(values)

    def resolve(self, current: Any) -> List[Any]:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.values == other.values  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.values))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}{self.values!r}"


class ArrayUnion(_ArraySentinel):
    """Add values to a stored array, skipping duplicates."""

    def resolve(self, current: Any) -> List[Any]:
        result = list(current) if isinstance(current, list) else []
        for value in self.values:
            if value not in result:
                result.append(value)
        return result


class ArrayRemove(_ArraySentinel):
    """Remove every occurrence of values from a stored array."""

    def resolve(self, current: Any) -> List[Any]:
        if not isinstance(current, list):
            return []
        return [item for item in current if item not in self.values]


@dataclass
class Snapshot:
    """Point-in-time view of one document."""

    id: str
    data: Optional[Dict[str, Any]] = None

    @property
    def exists(self) -> bool:
        return self.data is not None

    def get(self, key: str, default: Any = None) -> Any:
        if self.data is None:
            return default
        return self.data.get(key, default)


@dataclass
class WriteOp:
    """A single queued write."""

    kind: str  # 'set', 'update' or 'delete'
    collection: str
    doc_id: str
    data: Dict[str, Any] = field(default_factory=dict)
    merge: bool = False


def _resolve_value(value: Any, current: Any) -> Any:
    if isinstance(value, _ArraySentinel):
        return value.resolve(current)
    if isinstance(value, dict):
        return {k: _resolve_value(v, None) for k, v in value.items()}
    return copy.deepcopy(value)


def _deep_merge(current: Dict[str, Any], incoming: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(current)
    for key, value in incoming.items():
        existing = merged.get(key)
        if isinstance(value, dict) and isinstance(existing, dict):
            merged[key] = _deep_merge(existing, value)
        else:
            merged[key] = _resolve_value(value, existing)
    return merged


def apply_write(current: Optional[Dict[str, Any]], op: WriteOp) -> Optional[Dict[str, Any]]:
    """Compute a document's new body after ``op``; ``None`` means deleted.

    ``set`` replaces the body (or deep-merges nested maps when
    ``merge`` is true).  ``update`` replaces only the named top-level
    fields and requires the document to exist.
    """
    if op.kind == "delete":
        return None
    if op.kind == "set":
        if op.merge and current is not None:
            return _deep_merge(current, op.data)
        return {k: _resolve_value(v, None) for k, v in op.data.items()}
    if op.kind == "update":
        if current is None:
            raise DocumentNotFound(f"{op.collection}/{op.doc_id} does not exist")
        updated = dict(current)
        for key, value in op.data.items():
            updated[key] = _resolve_value(value, current.get(key))
        return updated
    raise StoreError(f"Unknown write kind: {op.kind}")


def matches(data: Dict[str, Any], field_name: str, op: str, value: Any) -> bool:
    """Evaluate one query predicate against a document body."""
    stored = data.get(field_name)
    if op == "==":
        return stored == value
    if op == "in":
        return stored in value
    if op == "array_contains":
        return isinstance(stored, list) and value in stored
    raise StoreError(f"Unsupported query operator: {op}")


class WriteBatch:
    """Writes queued together and committed all-or-nothing."""

    def __init__(self, store: "DocumentStore") -> None:
        self._store = store
        self._ops: List[WriteOp] = []
        self._committed = False

    def set(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False) -> "WriteBatch":
        self._ops.append(WriteOp("set", collection, doc_id, data, merge))
        return self

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> "WriteBatch":
        self._ops.append(WriteOp("update", collection, doc_id, fields))
        return self

    def delete(self, collection: str, doc_id: str) -> "WriteBatch":
        self._ops.append(WriteOp("delete", collection, doc_id))
        return self

    def __len__(self) -> int:
        return len(self._ops)

    def commit(self) -> None:
        if self._committed:
            raise StoreError("Batch already committed")
        self._committed = True
        if self._ops:
            self._store._apply(list(self._ops))


class DocumentStore(ABC):
    """Abstract base class for all document store adapters."""

    @abstractmethod
    def _read(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return a copy of one document body, or ``None``."""
        raise NotImplementedError

    @abstractmethod
    def _scan(self, collection: str) -> Iterator[Tuple[str, Dict[str, Any]]]:
        """Yield ``(id, body)`` copies for every document in a collection."""
        raise NotImplementedError

    @abstractmethod
    def _apply(self, ops: Sequence[WriteOp]) -> None:
        """Apply all writes atomically or raise without applying any."""
        raise NotImplementedError

    def close(self) -> None:
        """Release resources held by the adapter."""

    # Reads

    def get(self, collection: str, doc_id: str) -> Snapshot:
        return Snapshot(doc_id, self._read(collection, doc_id))

    def get_all(self, collection: str, doc_ids: Iterable[str]) -> List[Snapshot]:
        return [self.get(collection, doc_id) for doc_id in doc_ids]

    def where(self, collection: str, field_name: str, op: str, value: Any) -> List[Snapshot]:
        """Return the documents whose ``field_name`` satisfies ``op value``."""
        if op not in QUERY_OPERATORS:
            raise StoreError(f"Unsupported query operator: {op}")
        if op == "in":
            value = list(value)
            if len(value) > MAX_IN_VALUES:
                raise StoreError(f"'in' queries accept at most {MAX_IN_VALUES} values, got {len(value)}")
            if not value:
                return []
        return [
            Snapshot(doc_id, data)
            for doc_id, data in self._scan(collection)
            if matches(data, field_name, op, value)
        ]

    def stream(self, collection: str) -> List[Snapshot]:
        return [Snapshot(doc_id, data) for doc_id, data in self._scan(collection)]

    def count(self, collection: str, field_name: Optional[str] = None, value: Any = None) -> int:
        if field_name is None:
            return sum(1 for _ in self._scan(collection))
        return len(self.where(collection, field_name, "==", value))

    # Writes

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = generate_id()
        self.set(collection, doc_id, data)
        return doc_id

    def set(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False) -> None:
        self._apply([WriteOp("set", collection, doc_id, data, merge)])

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        self._apply([WriteOp("update", collection, doc_id, fields)])

    def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document; deleting a missing document is a no-op."""
        self._apply([WriteOp("delete", collection, doc_id)])

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
