"""Normalization of entity names into filesystem-safe keys and paths."""

import posixpath
import re
from typing import Any

from keepsake.hashing import hash_key

# Anything outside this set is collapsed into a single separator
_UNSAFE = re.compile(r"[^a-z0-9._-]+")
_SEPARATOR = "-"


def normalize_key(value: str) -> str:
    """Normalize an arbitrary string into a filesystem-safe key.

    The value is trimmed and case-folded, runs of unsafe characters are
    replaced by ``-`` and leading/trailing separators and dots are removed,
    so the result can never be ``.`` or ``..``. The mapping is idempotent.

    Examples:
        >>> normalize_key("  User:42 ")
        'user-42'
        >>> normalize_key("app.Settings")
        'app.settings'
        >>> normalize_key("../")
        ''
    """
    key = _UNSAFE.sub(_SEPARATOR, value.strip().casefold())
    return key.strip("-._")


def normalize_path(value: str) -> str:
    """Clean up a path string without touching the filesystem.

    Backslashes become forward slashes, repeated separators collapse and
    ``.``/``..`` segments are resolved lexically. Symlinks are not resolved.
    """
    if not value:
        return ""
    return posixpath.normpath(re.sub(r"[\\/]+", "/", value))


class DefaultKeyCodec:
    """KeyCodec backed by the module-level helpers."""

    def normalize_key(self, value: str) -> str:
        return normalize_key(value)

    def normalize_path(self, value: str) -> str:
        return normalize_path(value)

    def hash_key(self, value: Any) -> str:
        return hash_key(value)
