"""Pytest configuration and fixtures."""

from datetime import datetime, timezone

import pytest

from keepsake.clock import Timestamp
from keepsake.config import StorageManager, get_settings
from keepsake.store.memory import MemoryFileStore

FIXED_MOMENT = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class FixedClock:
    """Clock that always returns the same instant and counts calls."""

    def __init__(self, moment: datetime = FIXED_MOMENT) -> None:
        self.timestamp = Timestamp.from_datetime(moment)
        self.calls = 0

    def now(self) -> Timestamp:
        self.calls += 1
        return self.timestamp


@pytest.fixture(autouse=True)
def isolated_storage(tmp_path, monkeypatch):
    """Point the process-wide default storage directory at a temp dir."""
    monkeypatch.setenv("KEEPSAKE_STORAGE_DIR", str(tmp_path / "default-storage"))
    monkeypatch.delenv("KEEPSAKE_APP_NAME", raising=False)
    get_settings.cache_clear()
    StorageManager.set_storage_directory(None)
    yield
    get_settings.cache_clear()
    StorageManager.set_storage_directory(None)


@pytest.fixture
def storage_dir(tmp_path):
    """A storage directory that does not exist yet."""
    return str(tmp_path / "storage")


@pytest.fixture
def clock():
    """Create a FixedClock."""
    return FixedClock()


@pytest.fixture
def memory_store():
    """Create an unbounded MemoryFileStore."""
    return MemoryFileStore()
