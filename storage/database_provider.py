"""Stores chunk payloads as BLOB rows inside the metadata database."""

import asyncio
import sqlite3
from functools import partial

from common.constants import DATABASE_PROVIDER_ID
from common.exceptions import NotFoundError, StorageIOError
from common.logging_config import get_logger
from controller.repositories.chunk_data_repository import ChunkDataRepository
from storage.base_provider import StorageProvider

logger = get_logger(__name__)


class DatabaseStorageProvider(StorageProvider):
    """
    Structured-record provider. The location token is the chunk id itself.
    Every call opens its own connection, so concurrent calls are safe.
    """

    def __init__(self, repository=ChunkDataRepository):
        self.repository = repository

    @property
    def provider_id(self) -> str:
        return DATABASE_PROVIDER_ID

    @property
    def display_name(self) -> str:
        return "Database Storage Provider"

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args))

    async def store(self, chunk_id: str, data: bytes) -> str:
        try:
            await self._run(self.repository.insert, chunk_id, data)
        except sqlite3.Error as e:
            logger.error(f"Failed to store chunk {chunk_id} in database: {e}", exc_info=True)
            raise StorageIOError(f"Failed to store chunk {chunk_id} in database: {e}") from e

        logger.debug(f"Stored chunk {chunk_id} in database, size={len(data)} bytes")
        return chunk_id

    async def retrieve(self, chunk_id: str, storage_location: str) -> bytes:
        try:
            data = await self._run(self.repository.get_data, chunk_id)
        except sqlite3.Error as e:
            logger.error(f"Failed to retrieve chunk {chunk_id} from database: {e}")
            raise StorageIOError(f"Failed to retrieve chunk {chunk_id} from database: {e}") from e

        if data is None:
            logger.warning(f"Chunk not found in database: {chunk_id}")
            raise NotFoundError(f"Chunk not found in database: {chunk_id}")

        logger.debug(f"Retrieved chunk {chunk_id} from database, size={len(data)} bytes")
        return data

    async def delete(self, chunk_id: str, storage_location: str) -> bool:
        try:
            deleted = await self._run(self.repository.delete, chunk_id)
        except sqlite3.Error as e:
            raise StorageIOError(f"Failed to delete chunk {chunk_id} from database: {e}") from e

        if deleted:
            logger.debug(f"Deleted chunk {chunk_id} from database")
        else:
            logger.warning(f"Chunk not found for deletion in database: {chunk_id}")
        return deleted

    async def exists(self, chunk_id: str, storage_location: str) -> bool:
        try:
            exists = await self._run(self.repository.exists, chunk_id)
        except sqlite3.Error as e:
            logger.error(f"Failed to check chunk existence {chunk_id} in database: {e}")
            return False

        logger.debug(f"Chunk {chunk_id} exists check in database: {exists}")
        return exists

    async def health_check(self) -> bool:
        try:
            is_healthy = await self._run(self.repository.ping)
        except Exception as e:
            logger.error(f"Database storage provider health check failed: {e}")
            return False

        logger.debug(f"Database storage provider health check: {is_healthy}")
        return is_healthy
