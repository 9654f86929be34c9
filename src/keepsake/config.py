"""Settings and the process-wide default storage directory."""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from platformdirs import user_cache_dir

from keepsake.keys import normalize_path

APP_NAME = "keepsake"

# Environment variable overrides (useful for tests and deployments)
ENV_STORAGE_DIR = "KEEPSAKE_STORAGE_DIR"
ENV_APP_NAME = "KEEPSAKE_APP_NAME"


def _default_storage_dir(app_name: str) -> str:
    override = os.getenv(ENV_STORAGE_DIR)
    if override:
        return str(Path(override).expanduser())
    return user_cache_dir(appname=app_name, appauthor=False)


@dataclass(frozen=True)
class Settings:
    """Settings loaded from environment variables."""

    app_name: str = field(default_factory=lambda: os.getenv(ENV_APP_NAME, APP_NAME))
    storage_dir: str = ""

    def __post_init__(self) -> None:
        if not self.app_name.strip():
            raise ValueError(f"{ENV_APP_NAME} must not be empty")
        if not self.storage_dir:
            object.__setattr__(
                self, "storage_dir", _default_storage_dir(self.app_name)
            )


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()


class StorageManager:
    """Process-wide resolver for the default storage directory.

    Entities created without an explicit directory store their files here.
    The directory comes from Settings unless overridden for the process with
    set_storage_directory().
    """

    _override: str | None = None

    def get_storage_directory(self) -> str:
        """Return the normalized default storage root."""
        directory = StorageManager._override or get_settings().storage_dir
        return normalize_path(directory)

    @classmethod
    def set_storage_directory(cls, directory: str | Path | None) -> None:
        """Override the default root for this process; None restores Settings."""
        cls._override = str(directory) if directory is not None else None


def get_storage_directory() -> str:
    """Return the process-wide default storage directory."""
    return StorageManager().get_storage_directory()


def set_storage_directory(directory: str | Path | None) -> None:
    """Override the process-wide default storage directory."""
    StorageManager.set_storage_directory(directory)
