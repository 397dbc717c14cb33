"""Stores chunk payloads as raw files under a local directory."""

import asyncio
import uuid
from functools import partial
from pathlib import Path
from typing import Union

from common.constants import CHUNK_FILE_SUFFIX, FILESYSTEM_PROVIDER_ID
from common.exceptions import InvalidInputError, NotFoundError, StorageIOError
from common.logging_config import get_logger
from storage.base_provider import StorageProvider

logger = get_logger(__name__)

HEALTH_CHECK_CONTENT = b"health_check"


class FileSystemStorageProvider(StorageProvider):
    """
    Local-path provider. Location token is '<chunk_id>.chunk', relative to
    the configured storage root. Payload files carry no header.
    """

    def __init__(self, storage_root: Union[str, Path]):
        """
        Args:
            storage_root: Directory holding chunk files (created if missing)
        """
        self.storage_root = Path(storage_root)
        if not self.storage_root.exists():
            self.storage_root.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created storage directory: {self.storage_root}")

    @property
    def provider_id(self) -> str:
        return FILESYSTEM_PROVIDER_ID

    @property
    def display_name(self) -> str:
        return "File System Storage Provider"

    def get_chunk_path(self, storage_location: str) -> Path:
        """
        Resolve a location token to a path inside the storage root.

        Raises:
            InvalidInputError: If the token is empty or escapes the root
        """
        if not storage_location or Path(storage_location).name != storage_location:
            raise InvalidInputError(f"Invalid storage location: {storage_location!r}")
        return self.storage_root / storage_location

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args))

    def _write_chunk(self, chunk_id: str, data: bytes) -> str:
        storage_location = f"{chunk_id}{CHUNK_FILE_SUFFIX}"
        filepath = self.get_chunk_path(storage_location)
        try:
            filepath.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to store chunk {chunk_id}: {e}", exc_info=True)
            raise StorageIOError(f"Failed to store chunk {chunk_id}: {e}") from e

        logger.debug(f"Stored chunk {chunk_id} to {filepath}, size={len(data)} bytes")
        return storage_location

    def _read_chunk(self, chunk_id: str, storage_location: str) -> bytes:
        filepath = self.get_chunk_path(storage_location)
        if not filepath.is_file():
            logger.warning(f"Chunk file not found: {filepath}")
            raise NotFoundError(f"Chunk file not found: {filepath}")
        try:
            data = filepath.read_bytes()
        except OSError as e:
            logger.error(f"Failed to retrieve chunk {chunk_id} from {storage_location}: {e}")
            raise StorageIOError(f"Failed to read chunk {chunk_id}: {e}") from e

        logger.debug(f"Retrieved chunk {chunk_id} from {filepath}, size={len(data)} bytes")
        return data

    def _delete_chunk(self, chunk_id: str, storage_location: str) -> bool:
        filepath = self.get_chunk_path(storage_location)
        if not filepath.exists():
            logger.warning(f"Chunk file not found for deletion: {filepath}")
            return False
        try:
            filepath.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageIOError(f"Failed to delete chunk {chunk_id}: {e}") from e

        logger.debug(f"Deleted chunk {chunk_id} from {filepath}")
        return True

    def _probe(self) -> bool:
        if not self.storage_root.is_dir():
            logger.warning(f"Storage directory does not exist: {self.storage_root}")
            return False

        probe = self.storage_root / f"health_check_{uuid.uuid4()}.tmp"
        try:
            probe.write_bytes(HEALTH_CHECK_CONTENT)
            content = probe.read_bytes()
        finally:
            if probe.exists():
                probe.unlink()
        return content == HEALTH_CHECK_CONTENT

    async def store(self, chunk_id: str, data: bytes) -> str:
        return await self._run(self._write_chunk, chunk_id, data)

    async def retrieve(self, chunk_id: str, storage_location: str) -> bytes:
        return await self._run(self._read_chunk, chunk_id, storage_location)

    async def delete(self, chunk_id: str, storage_location: str) -> bool:
        return await self._run(self._delete_chunk, chunk_id, storage_location)

    async def exists(self, chunk_id: str, storage_location: str) -> bool:
        try:
            filepath = self.get_chunk_path(storage_location)
        except InvalidInputError:
            return False
        exists = await self._run(filepath.is_file)
        logger.debug(f"Chunk {chunk_id} exists check: {exists}")
        return exists

    async def health_check(self) -> bool:
        try:
            is_healthy = await self._run(self._probe)
        except Exception as e:
            logger.error(f"FileSystem storage provider health check failed: {e}")
            return False

        logger.debug(f"FileSystem storage provider health check: {is_healthy}")
        return is_healthy
