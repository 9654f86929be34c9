"""Keepsake: named, hash-validated values cached to generated files."""

from importlib.metadata import PackageNotFoundError, version

from keepsake.clock import SystemClock, Timestamp
from keepsake.config import (
    Settings,
    StorageManager,
    get_settings,
    get_storage_directory,
    set_storage_directory,
)
from keepsake.entity import DataResource, PersistentEntity, resource_path
from keepsake.errors import (
    ExportFailure,
    HydrationError,
    InvalidIdentity,
    IOFailure,
    KeepsakeError,
)
from keepsake.hashing import hash_key
from keepsake.keys import DefaultKeyCodec, normalize_key, normalize_path
from keepsake.resource_file import read_record

try:
    __version__ = version("keepsake")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

__all__ = [
    "DataResource",
    "DefaultKeyCodec",
    "ExportFailure",
    "HydrationError",
    "IOFailure",
    "InvalidIdentity",
    "KeepsakeError",
    "PersistentEntity",
    "Settings",
    "StorageManager",
    "SystemClock",
    "Timestamp",
    "get_settings",
    "get_storage_directory",
    "hash_key",
    "normalize_key",
    "normalize_path",
    "read_record",
    "resource_path",
    "set_storage_directory",
    "__version__",
]
