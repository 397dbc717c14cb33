"""Shared pytest fixtures for all tests."""

import random
from typing import Dict

import pytest

from common.exceptions import NotFoundError, StorageIOError
from controller.config import StorageSettings
from controller.database import init_database
from controller.services.file_service import FileService
from storage.base_provider import StorageProvider
from storage.database_provider import DatabaseStorageProvider
from storage.filesystem_provider import FileSystemStorageProvider


class InMemoryStorageProvider(StorageProvider):
    """Dict-backed provider used to drive placement and failure scenarios."""

    def __init__(self, provider_id: str, fail_store: bool = False, healthy: bool = True):
        self._provider_id = provider_id
        self.fail_store = fail_store
        self.healthy = healthy
        self.blobs: Dict[str, bytes] = {}
        self.store_calls = []

    @property
    def provider_id(self) -> str:
        return self._provider_id

    @property
    def display_name(self) -> str:
        return f"In-memory provider {self._provider_id}"

    async def store(self, chunk_id: str, data: bytes) -> str:
        self.store_calls.append(chunk_id)
        if self.fail_store:
            raise StorageIOError(f"simulated store failure on {self._provider_id}")
        self.blobs[chunk_id] = bytes(data)
        return f"mem:{chunk_id}"

    async def retrieve(self, chunk_id: str, storage_location: str) -> bytes:
        if storage_location != f"mem:{chunk_id}" or chunk_id not in self.blobs:
            raise NotFoundError(f"Chunk not found in memory: {chunk_id}")
        return self.blobs[chunk_id]

    async def delete(self, chunk_id: str, storage_location: str) -> bool:
        return self.blobs.pop(chunk_id, None) is not None

    async def exists(self, chunk_id: str, storage_location: str) -> bool:
        return chunk_id in self.blobs

    async def health_check(self) -> bool:
        if not self.healthy:
            raise RuntimeError("probe failed")
        return True


def make_bytes(size: int, seed: int = 1234) -> bytes:
    return random.Random(seed).randbytes(size)


@pytest.fixture
def test_db(monkeypatch, tmp_path):
    """
    Create a temporary test database for each test.
    """
    db_path = tmp_path / "test.db"
    monkeypatch.setattr("controller.database.DATABASE_PATH", str(db_path))
    monkeypatch.setattr("controller.config.DATABASE_PATH", str(db_path))
    init_database()
    yield db_path


@pytest.fixture
def settings(tmp_path):
    """
    Small chunk bounds so tests produce several chunks from a few KiB.
    """
    return StorageSettings(
        min_chunk_size=1024,
        default_chunk_size=4096,
        max_chunk_size=16384,
        file_system_storage_root=str(tmp_path / "storages"),
        file_system_download_root=str(tmp_path / "downloads"),
    )


@pytest.fixture
def fs_provider(settings):
    return FileSystemStorageProvider(settings.file_system_storage_root)


@pytest.fixture
def db_provider(test_db):
    return DatabaseStorageProvider()


@pytest.fixture
def make_memory_provider():
    return InMemoryStorageProvider


@pytest.fixture
def file_service(test_db, settings, fs_provider, db_provider):
    return FileService([fs_provider, db_provider], settings)


@pytest.fixture
def sample_file(tmp_path):
    """
    10,000 bytes of pseudo-random content (10 chunks at 1 KiB).
    """
    file_path = tmp_path / "upload" / "sample.bin"
    file_path.parent.mkdir()
    file_path.write_bytes(make_bytes(10_000))
    return file_path
