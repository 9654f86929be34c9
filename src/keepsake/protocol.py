"""Protocols for storable payload types and the collaborators an entity uses."""

from typing import Any, BinaryIO, Protocol, runtime_checkable

from keepsake.clock import Timestamp


@runtime_checkable
class IStorable(Protocol):
    """Protocol for domain types that can be embedded in an entity's data.

    Built-in scalars and containers are handled by the codec directly;
    anything else must implement this protocol to be saved.
    """

    def get_stable_hash(self) -> str:
        """Returns a deterministic SHA-256 hash of the object's structural state.

        The hash must be:
        - Deterministic: Same state always produces same hash
        - Stable: Hash doesn't change across serialization/deserialization

        Returns:
            A hexadecimal SHA-256 hash string (64 characters).
        """
        ...

    def to_stream(self, stream: BinaryIO) -> None:
        """Serializes the object to a binary stream.

        Args:
            stream: A binary I/O stream to write the serialized data to.
        """
        ...

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "IStorable":
        """Hydrates the object from a binary stream.

        This must be the inverse operation of to_stream.
        """
        ...


@runtime_checkable
class FileStore(Protocol):
    """Reads and writes whole resource files by path."""

    def exists(self, path: str) -> bool:
        """True iff a regular file exists at path."""
        ...

    def save(self, path: str, content: bytes) -> None:
        """Write content to path, creating parent directories as needed."""
        ...

    def load(self, path: str) -> bytes:
        """Return the content stored at path.

        Raises:
            KeyError: If nothing is stored at path.
        """
        ...


@runtime_checkable
class KeyCodec(Protocol):
    """Hashing of values and normalization of names into keys and paths."""

    def normalize_key(self, value: str) -> str: ...

    def normalize_path(self, value: str) -> str: ...

    def hash_key(self, value: Any) -> str: ...


@runtime_checkable
class Clock(Protocol):
    """Source of generation timestamps."""

    def now(self) -> Timestamp: ...


@runtime_checkable
class StorageDirectoryResolver(Protocol):
    """Supplies the default storage root when none is given."""

    def get_storage_directory(self) -> str: ...
