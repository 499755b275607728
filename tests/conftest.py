"""Shared fixtures."""

import pytest
from layered_settings import InterProcessFileLock

from .fakes import InMemoryDocumentStore
from .fakes import RecordingFileLock


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def file_lock():
    return RecordingFileLock()


@pytest.fixture
def disk_lock(tmp_path):
    """Real inter-process lock with lock files kept under tmp_path."""
    return InterProcessFileLock(tmp_path / "locks")
