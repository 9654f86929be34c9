"""Recursive content hashing for entity data."""

import hashlib
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

from keepsake.protocol import IStorable


def _digest(tag: bytes, payload: bytes) -> str:
    return hashlib.sha256(tag + b":" + payload).hexdigest()


def hash_key(value: Any) -> str:
    """Recursively hash a value to produce a deterministic SHA-256 hash.

    Every value is hashed together with a type tag, so structurally
    different values of different types (``1`` and ``"1"``, ``[]`` and
    ``{}``) never share a hash.

    Supports:
    - IStorable objects: Uses their get_stable_hash() method
    - dict/Mapping: Sorts keys, recursively hashes values
    - list/tuple/Sequence: Recursively hashes each element in order
    - bool, int, float, str, bytes: Direct hashing
    - Decimal: Canonicalized to string then hashed
    - None: Special hash value

    Args:
        value: The value to hash.

    Returns:
        A hexadecimal SHA-256 hash string (64 characters).

    Raises:
        TypeError: If value type is not supported.
    """
    if value is None:
        return _digest(b"none", b"")

    if isinstance(value, IStorable):
        return value.get_stable_hash()

    # bool before int since bool is a subclass of int
    if isinstance(value, bool):
        return _digest(b"bool", b"1" if value else b"0")

    if isinstance(value, int):
        return _digest(b"int", str(value).encode("utf-8"))

    if isinstance(value, float):
        # float.hex() is exact and platform independent
        return _digest(b"float", value.hex().encode("ascii"))

    if isinstance(value, str):
        return _digest(b"str", value.encode("utf-8"))

    if isinstance(value, (bytes, bytearray)):
        return _digest(b"bytes", bytes(value))

    if isinstance(value, Decimal):
        return _digest(b"decimal", str(value).encode("utf-8"))

    if isinstance(value, Mapping):
        # Sort keys for canonical ordering
        sorted_items = sorted(value.items(), key=lambda x: hash_key(x[0]))
        hasher = hashlib.sha256(b"dict:")
        for key, val in sorted_items:
            hasher.update(hash_key(key).encode("utf-8"))
            hasher.update(hash_key(val).encode("utf-8"))
        return hasher.hexdigest()

    if isinstance(value, Sequence):
        tag = b"tuple:" if isinstance(value, tuple) else b"list:"
        hasher = hashlib.sha256(tag)
        for item in value:
            hasher.update(hash_key(item).encode("utf-8"))
        return hasher.hexdigest()

    raise TypeError(
        f"Unsupported type for hashing: {type(value).__name__}. "
        f"Value must be IStorable, dict, list, tuple, str, bytes, int, float, "
        f"bool, Decimal, or None."
    )
