"""
Storage Factory

Provides a single entry point for building the order store. The rest of
the application only sees BaseStorage and stays agnostic about which
implementation is being used.

Usage:
    from orderpad.storage import create_storage

    storage = create_storage(settings)
    await storage.startup()
    ...
    await storage.shutdown()

Backend Switching:
    - STORAGE_BACKEND=memory   → MemoryStorage (no database)
    - STORAGE_BACKEND=database → DatabaseStorage (DATABASE_URL)
    - unset                    → memory in development, database otherwise
"""

import logging
from typing import Optional

from orderpad.core.config import Settings, StorageBackend, get_settings
from orderpad.database import create_engine
from orderpad.storage.base import BaseStorage
from orderpad.storage.memory import MemoryStorage
from orderpad.storage.database import DatabaseStorage

logger = logging.getLogger(__name__)


def create_storage(settings: Optional[Settings] = None) -> BaseStorage:
    """
    Build the configured order store.

    Unlike a cached singleton, every call returns a fresh instance; the
    application lifespan owns the one it creates and shuts it down.

    Returns:
        BaseStorage: MemoryStorage or DatabaseStorage

    Example:
        >>> storage = create_storage(Settings(storage_backend="memory"))
        >>> print(storage.provider_name)
        'memory'
    """
    settings = settings or get_settings()
    backend = settings.active_storage_backend

    if backend == StorageBackend.MEMORY:
        logger.info("Storage: Using MemoryStorage")
        return MemoryStorage(order_number_prefix=settings.order_number_prefix)

    logger.info(f"Storage: Using DatabaseStorage ({settings.env_mode.value} mode)")
    return DatabaseStorage(
        engine=create_engine(settings),
        order_number_prefix=settings.order_number_prefix,
        create_tables=settings.database_create_tables,
    )


__all__ = [
    "create_storage",
    "BaseStorage",
    "MemoryStorage",
    "DatabaseStorage",
]
