"""On-disk layout of a saved resource.

A resource file is a human-readable provenance header followed by the
codec-encoded export record::

    #!keepsake-resource 1760781600
    #
    #  Name      : user-42
    #  Generated : 2025-10-18 10:00:00 UTC
    #  Hash      : 5f1c...
    #
    #  This file is generated by myapp.entities.UserResource.
    #
    #  Do not edit it manually.
    #

    <record bytes>

The header ends at the first empty line; everything after it is the record.
"""

from typing import Any

from keepsake.codec import deserialize
from keepsake.protocol import FileStore
from keepsake.store.disk import DiskFileStore

MAGIC = b"#!keepsake-resource"
HEADER_END = b"\n\n"


def _header_value(value: Any) -> str:
    # Header values must stay on one line
    return " ".join(str(value).split())


def render(
    *,
    name: str,
    generated: str,
    unix_timestamp: int,
    hash: str,
    generator: str,
    record: bytes,
) -> bytes:
    """Assemble the full file content for an exported record."""
    lines = [
        f"{MAGIC.decode('ascii')} {unix_timestamp}",
        "#",
        f"#  Name      : {_header_value(name)}",
        f"#  Generated : {_header_value(generated)}",
        f"#  Hash      : {_header_value(hash)}",
        "#",
        f"#  This file is generated by {_header_value(generator)}.",
        "#",
        "#  Do not edit it manually.",
        "#",
    ]
    header = "\n".join(lines).encode("utf-8")
    return header + HEADER_END + record


def split(content: bytes) -> tuple[str, bytes]:
    """Split file content into its header text and record bytes.

    Raises:
        ValueError: If content is not a resource file.
    """
    if not content.startswith(MAGIC):
        raise ValueError("Not a resource file: missing header")
    end = content.find(HEADER_END)
    if end == -1:
        raise ValueError("Not a resource file: unterminated header")
    return content[:end].decode("utf-8"), content[end + len(HEADER_END) :]


def parse(content: bytes) -> dict[str, Any]:
    """Decode file content back into the record it was rendered from.

    Raises:
        ValueError: If content is malformed.
    """
    _, payload = split(content)
    record = deserialize(payload)
    if not isinstance(record, dict):
        raise ValueError(
            f"Invalid resource file: record is {type(record).__name__}, expected dict"
        )
    return record


def read_record(path: str, store: FileStore | None = None) -> dict[str, Any]:
    """Load and decode the record saved at path.

    Raises:
        KeyError: If no file exists at path.
        ValueError: If the file is malformed.
    """
    store = store or DiskFileStore()
    return parse(store.load(path))
