"""Base class for FileStore implementations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class StoreStats:
    """Store statistics tracking existence checks, reads, and writes."""

    checks: int = 0  # exists() was called
    reads: int = 0  # load() returned content
    writes: int = 0  # save() completed


class BaseFileStore(ABC):
    """Abstract base class for resource file storage.

    Stores whole files addressed by path. Content is opaque bytes; encoding
    and decoding belong to the entity and resource_file layers.

    Stores are expected to keep every file they report as saved. Bounded
    in-memory stores are the exception: once they evict a file, exists()
    returns False for it and load() raises KeyError.
    """

    def __init__(self) -> None:
        """Initialize the store with statistics."""
        self.stats = StoreStats()

    def reset_stats(self) -> None:
        """Reset store statistics to zero."""
        self.stats = StoreStats()

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check if a file exists at the given path.

        Args:
            path: Normalized file path.

        Returns:
            True if a regular file exists, False otherwise.
        """
        ...

    @abstractmethod
    def load(self, path: str) -> bytes:
        """Read the content stored at path.

        Raises:
            KeyError: If nothing is stored at path.
        """
        ...

    @abstractmethod
    def save(self, path: str, content: bytes) -> None:
        """Write content to path, replacing any previous content.

        Parent directories are created as needed. A failed write must leave
        any previous content untouched.

        Raises:
            IOFailure: If the write fails.
        """
        ...
