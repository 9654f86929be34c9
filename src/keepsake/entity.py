"""PersistentEntity: a named value cached to a generated resource file."""

from __future__ import annotations

import logging
import posixpath
from abc import ABC, abstractmethod
from collections.abc import Mapping
from types import TracebackType
from typing import Any, Generic, TypeVar

from keepsake import resource_file
from keepsake.clock import SystemClock, Timestamp
from keepsake.codec import serialize, type_label
from keepsake.config import StorageManager
from keepsake.errors import ExportFailure, HydrationError, InvalidIdentity
from keepsake.keys import DefaultKeyCodec
from keepsake.protocol import Clock, FileStore, KeyCodec, StorageDirectoryResolver
from keepsake.store.disk import DiskFileStore

logger = logging.getLogger(__name__)

T = TypeVar("T")
E = TypeVar("E", bound="PersistentEntity[Any]")

FILE_EXTENSION = ".resource.dat"

RECORD_FIELDS = (
    "name",
    "path",
    "generator",
    "generated",
    "timestamp",
    "type",
    "hash",
    "data",
)

_MISSING: Any = object()

# Raised by hashing or encoding data outside the storable universe, including
# unencodable strings and cyclic containers
_HASH_ERRORS = (TypeError, ValueError, RecursionError)
_ENCODE_ERRORS = (TypeError, ValueError, OverflowError, RecursionError)


def qualified_name(kind: type) -> str:
    """Return the dotted ``module.QualName`` identifier of a class."""
    return f"{kind.__module__}.{kind.__qualname__}"


def resource_path(
    name: str,
    directory: str,
    *,
    codec: KeyCodec | None = None,
    extension: str = FILE_EXTENSION,
) -> str:
    """Derive the file path of the resource called name under directory."""
    codec = codec or DefaultKeyCodec()
    filename = codec.normalize_key(name)
    return codec.normalize_path(f"{directory}/{filename}{extension}")


class PersistentEntity(ABC, Generic[T]):
    """A named, hash-validated value that can be saved to and restored from disk.

    The entity's name is either a normalized key (when constructed from a
    string) or the qualified name of a class (when constructed from a type,
    see for_type()). The name maps to exactly one file under the storage
    directory.

    The content hash of the data is captured at construction and serves as
    the baseline for change detection. save() always writes the current
    data with a freshly computed hash and never moves the baseline.

    Readonly entities are never written. Autosave entities are written by
    flush() (called on context manager exit) when their data differs from
    the baseline.

    Subclasses implement hydrate() to rebuild an instance from a record
    produced by export_data().

    Example::

        with DataResource("user:42", {"role": "admin"}, autosave=True) as user:
            user.data = {"role": "owner"}
        # flushed on exit: the file now holds {"role": "owner"}
    """

    FILE_EXTENSION = FILE_EXTENSION

    def __init__(
        self,
        name: str | type,
        data: T = None,  # type: ignore[assignment]
        *,
        readonly: bool = False,
        autosave: bool = False,
        directory: str | None = None,
        store: FileStore | None = None,
        codec: KeyCodec | None = None,
        clock: Clock | None = None,
        resolver: StorageDirectoryResolver | None = None,
    ) -> None:
        """Initialize the entity. No I/O happens until save() or exists().

        Args:
            name: A key string, normalized through the codec, or a class whose
                qualified name is used verbatim.
            data: The value to cache.
            readonly: Never write this entity to disk.
            autosave: Save on flush() when the data has changed.
            directory: Storage directory. Defaults to the resolver's directory.
            store: File store. Defaults to DiskFileStore.
            codec: Key codec. Defaults to DefaultKeyCodec.
            clock: Timestamp source. Defaults to SystemClock.
            resolver: Default directory source. Defaults to StorageManager.

        Raises:
            InvalidIdentity: If the name resolves to an empty key.
            TypeError: If data is of a type that cannot be hashed.
            ValueError: If data holds a string that cannot be encoded.
            RecursionError: If data contains a reference cycle.
        """
        self._bind(store, codec, clock, readonly, autosave)
        self._name = self.resource_name(name, self._codec)
        self._resource_data(data)
        self._storage_directory_from(directory, resolver)

    @classmethod
    def for_type(cls: type[E], kind: type, data: Any = None, **options: Any) -> E:
        """Create an entity identified by a class rather than a key string."""
        if not isinstance(kind, type):
            raise InvalidIdentity(f"Expected a class, got {type(kind).__name__}")
        return cls(kind, data, **options)

    @classmethod
    @abstractmethod
    def hydrate(cls: type[E], resource: Mapping[str, Any], **options: Any) -> E:
        """Build an entity from a record produced by export_data().

        Implementations usually delegate to _restore(). Options are the
        keyword arguments accepted by the constructor (except name and data).
        """
        ...

    @classmethod
    def load(
        cls: type[E],
        name: str | type,
        *,
        directory: str | None = None,
        store: FileStore | None = None,
        codec: KeyCodec | None = None,
        resolver: StorageDirectoryResolver | None = None,
        **options: Any,
    ) -> E:
        """Read the saved file for name and hydrate an entity from it.

        Raises:
            KeyError: If no file has been saved for name.
            ValueError: If the file is malformed.
            HydrationError: If the record does not validate.
        """
        codec = codec or DefaultKeyCodec()
        store = store or DiskFileStore()
        if directory is None:
            directory = (resolver or StorageManager()).get_storage_directory()
        key = cls.resource_name(name, codec)
        path = resource_path(
            key, directory, codec=codec, extension=cls.FILE_EXTENSION
        )
        record = resource_file.read_record(path, store)
        return cls.hydrate(
            record,
            directory=directory,
            store=store,
            codec=codec,
            resolver=resolver,
            **options,
        )

    @classmethod
    def resource_name(cls, name: str | type, codec: KeyCodec | None = None) -> str:
        """Resolve the identity for name.

        Raises:
            InvalidIdentity: If the result is empty.
        """
        if isinstance(name, type):
            resolved = qualified_name(name)
        elif isinstance(name, str):
            resolved = (codec or DefaultKeyCodec()).normalize_key(name)
        else:
            raise InvalidIdentity(
                f"Entity name must be a string or a class, got {type(name).__name__}"
            )
        if not resolved:
            raise InvalidIdentity(f"Entity name {name!r} resolves to an empty key")
        return resolved

    @classmethod
    def _restore(
        cls: type[E],
        resource: Mapping[str, Any],
        *,
        readonly: bool = False,
        autosave: bool = False,
        directory: str | None = None,
        store: FileStore | None = None,
        codec: KeyCodec | None = None,
        clock: Clock | None = None,
        resolver: StorageDirectoryResolver | None = None,
    ) -> E:
        """Rebuild an entity from an exported record, keeping its name verbatim.

        The directory defaults to the one the record was saved in.

        Raises:
            HydrationError: If fields are missing or the data does not match
                the recorded hash.
        """
        missing = [f for f in RECORD_FIELDS if f not in resource]
        if missing:
            raise HydrationError(f"Record is missing fields: {', '.join(missing)}")

        name = resource["name"]
        if not isinstance(name, str) or not name:
            raise HydrationError(f"Record has an invalid name: {name!r}")

        entity = cls.__new__(cls)
        entity._bind(store, codec, clock, readonly, autosave)
        entity._name = name
        try:
            entity._resource_data(resource["data"])
        except _HASH_ERRORS as exc:
            raise HydrationError(f"Record data for {name} cannot be hashed") from exc
        if entity.hash != resource["hash"]:
            raise HydrationError(
                f"Hash mismatch for {name}: record says {resource['hash']}, "
                f"data hashes to {entity.hash}"
            )
        if directory is None and resolver is None:
            directory = posixpath.dirname(str(resource["path"])) or None
        entity._storage_directory_from(directory, resolver)
        return entity

    def _bind(
        self,
        store: FileStore | None,
        codec: KeyCodec | None,
        clock: Clock | None,
        readonly: bool,
        autosave: bool,
    ) -> None:
        self._store: FileStore = store or DiskFileStore()
        self._codec: KeyCodec = codec or DefaultKeyCodec()
        self._clock: Clock = clock or SystemClock()
        self._readonly = readonly
        self._autosave = autosave
        self._filename: str | None = None

    def _resource_data(self, data: T) -> None:
        self._type = type_label(data)
        self._data = data
        self._hash = self._codec.hash_key(data)

    def _storage_directory_from(
        self,
        directory: str | None,
        resolver: StorageDirectoryResolver | None,
    ) -> None:
        if directory is None:
            directory = (resolver or StorageManager()).get_storage_directory()
        self._storage_directory = self._codec.normalize_path(str(directory))

    @property
    def name(self) -> str:
        return self._name

    @property
    def data(self) -> T:
        return self._data

    @data.setter
    def data(self, value: T) -> None:
        self._data = value

    @property
    def type(self) -> str:
        """Coarse type label of the data at construction time."""
        return self._type

    @property
    def hash(self) -> str:
        """Content hash of the data at construction time."""
        return self._hash

    @property
    def readonly(self) -> bool:
        return self._readonly

    @property
    def autosave(self) -> bool:
        return self._autosave

    @property
    def storage_directory(self) -> str:
        return self._storage_directory

    @property
    def generator(self) -> str:
        """Identifier of the concrete entity class, recorded in saved files."""
        return qualified_name(type(self))

    @property
    def is_dirty(self) -> bool:
        """True if the current data hashes differently from the baseline."""
        return self.data_hash() != self._hash

    def get_file_path(self) -> str:
        """Return the file path for this entity, computed once per instance."""
        if self._filename is None:
            self._filename = resource_path(
                self._name,
                self._storage_directory,
                codec=self._codec,
                extension=self.FILE_EXTENSION,
            )
        return self._filename

    def exists(self) -> bool:
        """Check whether a file has been saved for this entity."""
        return self._store.exists(self.get_file_path())

    def data_hash(self, data: Any = _MISSING) -> str:
        """Hash data, or the entity's current data when none is given."""
        return self._codec.hash_key(self._data if data is _MISSING else data)

    def build_record(self, generated: Timestamp) -> dict[str, Any]:
        """Build the record written by save() and consumed by hydrate().

        Raises:
            ExportFailure: If the data cannot be hashed.
        """
        try:
            data_hash = self.data_hash()
        except _HASH_ERRORS as exc:
            raise ExportFailure(
                f"Unable to export the {self._name} data store.", exc
            ) from exc
        return {
            "name": self._name,
            "path": self.get_file_path(),
            "generator": self.generator,
            "generated": generated.datetime,
            "timestamp": generated.unix_timestamp,
            "type": type_label(self._data),
            "hash": data_hash,
            "data": self._data,
        }

    def export_data(self, generated: Timestamp) -> bytes:
        """Serialize the record for this entity.

        Raises:
            ExportFailure: If the data cannot be serialized.
        """
        return self._encode(self.build_record(generated))

    def _encode(self, record: dict[str, Any]) -> bytes:
        try:
            return serialize(record)
        except _ENCODE_ERRORS as exc:
            raise ExportFailure(
                f"Unable to export the {self._name} data store.", exc
            ) from exc

    def save(self) -> None:
        """Write the current data to the entity's file.

        Readonly entities log a notice and return without writing.

        Raises:
            ExportFailure: If the data cannot be serialized.
            IOFailure: If the store cannot write the file.
        """
        if self._readonly:
            logger.info("Could not save %s, as it is readonly.", self._name)
            return

        generated = self._clock.now()
        record = self.build_record(generated)
        content = resource_file.render(
            name=self._name,
            generated=generated.datetime,
            unix_timestamp=generated.unix_timestamp,
            hash=record["hash"],
            generator=record["generator"],
            record=self._encode(record),
        )
        path = self.get_file_path()
        self._store.save(path, content)
        logger.debug("Saved %s to %s", self._name, path)

    def flush(self) -> bool:
        """Autosave the entity if it is writable, autosaving, and changed.

        Errors are logged and swallowed so that scope exit never raises.

        Returns:
            True if the entity was written.
        """
        if self._readonly or not self._autosave:
            return False
        try:
            if not self.is_dirty:
                return False
            self.save()
        except Exception:
            logger.exception("Autosave of %s failed", self._name)
            return False
        return True

    def close(self) -> bool:
        """Flush the entity; see flush()."""
        return self.flush()

    def __enter__(self: E) -> E:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.flush()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._name!r})"


class DataResource(PersistentEntity[Any]):
    """Concrete entity for any storable value."""

    @classmethod
    def hydrate(
        cls, resource: Mapping[str, Any], **options: Any
    ) -> "DataResource":
        return cls._restore(resource, **options)
