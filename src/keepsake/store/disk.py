"""DiskFileStore: Filesystem-based resource storage."""

import contextlib
import logging
from pathlib import Path

from keepsake.errors import IOFailure
from keepsake.store.base import BaseFileStore

logger = logging.getLogger(__name__)


class DiskFileStore(BaseFileStore):
    """Filesystem-backed store.

    Writes are atomic: content goes to a sibling ``.tmp`` file which then
    replaces the target, so readers never observe a partial file.
    """

    def exists(self, path: str) -> bool:
        """Check if a regular file exists at path."""
        self.stats.checks += 1
        return Path(path).is_file()

    def load(self, path: str) -> bytes:
        """Read a file's content.

        Raises:
            KeyError: If no file exists at path.
        """
        file_path = Path(path)
        if not file_path.is_file():
            raise KeyError(f"Resource file '{path}' not found")

        with open(file_path, "rb") as f:
            content = f.read()
        self.stats.reads += 1
        return content

    def save(self, path: str, content: bytes) -> None:
        """Write content to path atomically.

        Raises:
            IOFailure: If the directory cannot be created or the file
                cannot be written.
        """
        file_path = Path(path)
        temp_path = file_path.with_name(file_path.name + ".tmp")
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "wb") as f:
                f.write(content)
            temp_path.replace(file_path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                temp_path.unlink(missing_ok=True)
            raise IOFailure(f"Unable to write '{path}': {exc}") from exc

        self.stats.writes += 1
        logger.debug("Wrote %d bytes to %s", len(content), path)
