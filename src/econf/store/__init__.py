"""Document store adapters.

The service keeps its state in three collections (``users``,
``conferences`` and ``papers``) of a document store.  This package
defines the adapter interface, an in-memory adapter and a SQLite
adapter, plus ``create_store`` which picks one from the settings.
"""

from typing import Optional

from ..config.settings import Settings, settings as default_settings
from .base import (  # noqa: F401
    MAX_IN_VALUES,
    ArrayRemove,
    ArrayUnion,
    DocumentNotFound,
    DocumentStore,
    Snapshot,
    StoreError,
    WriteBatch,
)
from .memory import MemoryStore
from .sqlite import SqliteStore

USERS = "users"
CONFERENCES = "conferences"
PAPERS = "papers"


def create_store(config: Optional[Settings] = None) -> DocumentStore:
    """Build the store selected by ``store_backend``."""
    config = config or default_settings
    if config.store_backend == "sqlite":
        return SqliteStore(config.store_path)
    return MemoryStore()
