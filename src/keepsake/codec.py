"""Serialization codec for entity records and their data.

Handles native types (None, bool, int, float, str, bytes, Decimal, dict,
list, tuple) and IStorable domain types uniformly. Every value is written as
a 4-byte type tag followed by its payload; variable-sized payloads carry an
8-byte big-endian length prefix.
"""

import importlib
import struct
from collections.abc import Mapping
from decimal import Decimal
from io import BytesIO
from typing import Any

from keepsake.protocol import IStorable

_LENGTH_BYTES = 8


def is_storable(value: Any) -> bool:
    """Check if a value can be written by serialize().

    Containers are checked recursively. Dict keys must be strings.

    Examples:
        >>> is_storable({"role": "admin", "ids": [1, 2, 3]})
        True
        >>> is_storable({1: "a"})
        False
        >>> is_storable(lambda: None)
        False
    """
    if value is None:
        return True

    if isinstance(value, IStorable):
        return True

    if isinstance(value, (bool, int, float, str, bytes, Decimal)):
        return True

    if isinstance(value, Mapping):
        # Only plain dict is allowed, not arbitrary Mapping
        if not isinstance(value, dict):
            return False
        return all(
            isinstance(key, str) and is_storable(val) for key, val in value.items()
        )

    if isinstance(value, (list, tuple)):
        return all(is_storable(item) for item in value)

    return False


def type_label(value: Any) -> str:
    """Return the coarse type label recorded alongside exported data."""
    if value is None:
        return "none"
    for kind, label in (
        (bool, "bool"),
        (int, "int"),
        (float, "float"),
        (str, "str"),
        (bytes, "bytes"),
        (Decimal, "decimal"),
        (dict, "dict"),
        (list, "list"),
        (tuple, "tuple"),
    ):
        if isinstance(value, kind):
            return label
    return "object"


def serialize(value: Any) -> bytes:
    """Serialize a storable value to bytes.

    Args:
        value: The value to serialize. Must be storable.

    Returns:
        Serialized bytes with type information.

    Raises:
        TypeError: If value is not storable.
    """
    if not is_storable(value):
        raise TypeError(f"Value is not storable: {type(value)}")

    stream = BytesIO()
    _serialize_value(value, stream)
    return stream.getvalue()


def deserialize(data: bytes) -> Any:
    """Deserialize bytes produced by serialize().

    Raises:
        ValueError: If data format is invalid or has trailing bytes.
    """
    stream = BytesIO(data)
    value = _deserialize_value(stream)
    if stream.read(1):
        raise ValueError("Invalid serialization format: trailing data")
    return value


def _write_length(stream: BytesIO, length: int) -> None:
    stream.write(length.to_bytes(_LENGTH_BYTES, byteorder="big", signed=False))


def _write_blob(stream: BytesIO, data: bytes) -> None:
    _write_length(stream, len(data))
    stream.write(data)


def _serialize_value(value: Any, stream: BytesIO) -> None:
    """Internal recursive serialization."""
    if value is None:
        stream.write(b"none")
        return

    # bool (check before int since bool is subclass of int)
    if isinstance(value, bool):
        stream.write(b"bool")
        stream.write(b"\x01" if value else b"\x00")
        return

    # int: length-prefixed two's complement, so any size fits
    if isinstance(value, int):
        stream.write(b"int_")
        size = value.bit_length() // 8 + 1
        _write_blob(stream, value.to_bytes(size, byteorder="big", signed=True))
        return

    if isinstance(value, float):
        stream.write(b"flt_")
        stream.write(struct.pack(">d", value))
        return

    if isinstance(value, str):
        stream.write(b"str_")
        _write_blob(stream, value.encode("utf-8"))
        return

    if isinstance(value, bytes):
        stream.write(b"byts")
        _write_blob(stream, value)
        return

    if isinstance(value, Decimal):
        stream.write(b"decm")
        _write_blob(stream, str(value).encode("utf-8"))
        return

    # dict: keys written in sorted order for deterministic output
    if isinstance(value, dict):
        stream.write(b"dict")
        _write_length(stream, len(value))
        for key, val in sorted(value.items()):
            _write_blob(stream, key.encode("utf-8"))
            _serialize_value(val, stream)
        return

    if isinstance(value, (list, tuple)):
        stream.write(b"list" if isinstance(value, list) else b"tupl")
        _write_length(stream, len(value))
        for item in value:
            _serialize_value(item, stream)
        return

    if isinstance(value, IStorable):
        stream.write(b"stor")
        type_name = f"{value.__class__.__module__}:{value.__class__.__qualname__}"
        type_name_bytes = type_name.encode("utf-8")
        stream.write(len(type_name_bytes).to_bytes(4, byteorder="big", signed=False))
        stream.write(type_name_bytes)
        value.to_stream(stream)
        return

    # Should never reach here if is_storable() is correct
    raise TypeError(f"Unsupported type for serialization: {type(value)}")


def _read_exact(stream: BytesIO, size: int, what: str) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise ValueError(f"Invalid serialization format: truncated {what}")
    return data


def _read_length(stream: BytesIO, what: str) -> int:
    data = _read_exact(stream, _LENGTH_BYTES, f"{what} length")
    return int.from_bytes(data, byteorder="big", signed=False)


def _read_blob(stream: BytesIO, what: str) -> bytes:
    length = _read_length(stream, what)
    return _read_exact(stream, length, f"{what} data")


def _load_storable(type_name: str) -> Any:
    """Import the class named by a ``module:QualName`` string."""
    module_path, _, qualname = type_name.partition(":")
    try:
        target: Any = importlib.import_module(module_path)
    except ImportError as exc:
        raise ValueError(f"Cannot import storable type {type_name!r}") from exc
    for part in qualname.split("."):
        target = getattr(target, part, None)
        if target is None:
            raise ValueError(f"Unknown storable type {type_name!r}")
    if not hasattr(target, "from_stream"):
        raise ValueError(f"Type {type_name!r} is not storable")
    return target


def _deserialize_value(stream: BytesIO) -> Any:
    """Internal recursive deserialization."""
    tag = _read_exact(stream, 4, "type tag")

    if tag == b"none":
        return None

    if tag == b"bool":
        return _read_exact(stream, 1, "bool") == b"\x01"

    if tag == b"int_":
        return int.from_bytes(_read_blob(stream, "int"), byteorder="big", signed=True)

    if tag == b"flt_":
        return struct.unpack(">d", _read_exact(stream, 8, "float"))[0]

    if tag == b"str_":
        return _read_blob(stream, "str").decode("utf-8")

    if tag == b"byts":
        return _read_blob(stream, "bytes")

    if tag == b"decm":
        return Decimal(_read_blob(stream, "decimal").decode("utf-8"))

    if tag == b"dict":
        length = _read_length(stream, "dict")
        result = {}
        for _ in range(length):
            key = _read_blob(stream, "dict key").decode("utf-8")
            result[key] = _deserialize_value(stream)
        return result

    if tag in (b"list", b"tupl"):
        length = _read_length(stream, "sequence")
        items = [_deserialize_value(stream) for _ in range(length)]
        return items if tag == b"list" else tuple(items)

    if tag == b"stor":
        type_name_len = int.from_bytes(
            _read_exact(stream, 4, "storable type name length"),
            byteorder="big",
            signed=False,
        )
        type_name = _read_exact(stream, type_name_len, "storable type name")
        cls = _load_storable(type_name.decode("utf-8"))
        return cls.from_stream(stream)

    raise ValueError(f"Unknown type tag: {tag!r}")
