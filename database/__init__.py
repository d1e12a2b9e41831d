"""Storage layer of the optical store.

Two interchangeable implementations of the ``Storage`` contract:

- ``DatabaseManager``: relational store (SQLite by default) via SQLAlchemy
- ``MemoryStorage``: process-local dicts, empty on every start

Use ``create_storage()`` to build the one selected by configuration.
"""
from typing import Optional

from loguru import logger

from config.settings import settings
from .errors import ConflictError, StorageError
from .interfaces import EntityStore, ItemStore, Storage
from .manager import DatabaseManager
from .memory import MemoryStorage
from .seed import seed_defaults

__all__ = [
    "ConflictError",
    "DatabaseManager",
    "EntityStore",
    "ItemStore",
    "MemoryStorage",
    "Storage",
    "StorageError",
    "create_storage",
    "seed_defaults",
]


def create_storage(backend: Optional[str] = None,
                   database_url: Optional[str] = None) -> Storage:
    """Build the configured storage.

    Args:
        backend: ``"sql"`` or ``"memory"``; ``settings.storage_backend`` when None.
        database_url: Database URL for the SQL backend (optional).

    Returns:
        A ready-to-use storage. SQL tables are created if missing.

    Raises:
        ValueError: Unknown backend name.
    """
    backend = (backend or settings.storage_backend).lower()
    if backend == "memory":
        logger.info("Using in-memory storage")
        return MemoryStorage()
    if backend == "sql":
        db = DatabaseManager(database_url)
        db.create_tables()
        logger.info(f"Using database: {db.database_url}")
        return db
    raise ValueError(f"Unknown storage backend: {backend}")
