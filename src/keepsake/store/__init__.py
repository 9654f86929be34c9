"""Resource file storage backends."""

from keepsake.store.base import BaseFileStore, StoreStats
from keepsake.store.disk import DiskFileStore
from keepsake.store.memory import MemoryFileStore

__all__ = [
    "BaseFileStore",
    "DiskFileStore",
    "MemoryFileStore",
    "StoreStats",
]
