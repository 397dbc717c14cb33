"""File service: upload, download, delete and integrity scans over chunked storage."""

import asyncio
import sqlite3
from functools import partial
from pathlib import Path
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Sequence, Union

from common.exceptions import (
    DistributionError,
    IntegrityFailureError,
    InvalidInputError,
    NotFoundError,
    ProviderUnavailableError,
    StorageIOError,
)
from common.logging_config import get_logger
from common.types import ChunkPayload, ChunkStatus, FileStatus
from controller.chunk_distributor import ChunkDistributor
from controller.chunk_splitter import choose_chunk_size, split_file
from controller.config import StorageSettings
from controller.database import get_db_connection
from controller.repositories.chunk_repository import Chunk, ChunkRepository
from controller.repositories.file_repository import File, FileRepository
from controller.utils import generate_uuid, get_mime_type, is_valid_uuid, utcnow
from storage.base_provider import StorageProvider
from storage.checksum_validator import compute_file_checksum, verify_checksum, verify_file_checksum
from storage.provider_registry import ProviderRegistry

logger = get_logger(__name__)


class FileService:
    def __init__(
        self,
        providers: Union[Iterable[StorageProvider], ProviderRegistry],
        settings: Optional[StorageSettings] = None,
        distributor: Optional[ChunkDistributor] = None
    ):
        if isinstance(providers, ProviderRegistry):
            self.providers = providers
        else:
            self.providers = ProviderRegistry(providers)
        self.settings = settings or StorageSettings()
        self.distributor = distributor or ChunkDistributor()
        self.file_repo = FileRepository()
        self.chunk_repo = ChunkRepository()

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args))

    def _load_file(self, file_id: str) -> Optional[File]:
        if not is_valid_uuid(file_id):
            raise InvalidInputError(f"Invalid file ID format: {file_id!r}")
        return self.file_repo.get_with_chunks(file_id)

    async def upload_file(self, file_path: Union[str, Path], display_name: Optional[str] = None) -> File:
        """
        Upload a file: dedup by checksum, split, distribute, then persist.

        Args:
            file_path: Source file on local disk
            display_name: Name to record (defaults to the file's base name)

        Returns:
            The new File descriptor, or the existing one when identical
            content is already stored

        Raises:
            NotFoundError: If the source file does not exist
            DistributionError: If storing a chunk fails
            StorageIOError: If reading the source or writing metadata fails
        """
        path = Path(file_path)
        if not path.is_file():
            raise NotFoundError(f"File not found: {path}")

        file_name = display_name or path.name
        file_size = path.stat().st_size

        logger.info(f"Starting file upload: {file_name}, size={file_size} bytes")

        checksum = await self._run(compute_file_checksum, path)

        try:
            existing_file = self.file_repo.find_by_checksum(checksum)
            if existing_file is not None:
                existing_file = self.file_repo.get_with_chunks(existing_file.file_id)
        except sqlite3.Error as e:
            logger.error(f"Failed to look up existing file for {file_name}: {e}", exc_info=True)
            raise StorageIOError(f"Failed to look up existing file for {file_name}: {e}") from e

        if existing_file is not None:
            logger.info(
                f"File already exists with same checksum: {existing_file.name} "
                f"[file_id={existing_file.file_id}]"
            )
            return existing_file

        chunk_size = choose_chunk_size(file_size, self.settings)
        payloads = await self._run(split_file, path, chunk_size)

        file = File(
            file_id=generate_uuid(),
            name=file_name,
            size=file_size,
            mime_type=get_mime_type(file_name),
            checksum=checksum,
            total_chunks=len(payloads),
            chunk_size=chunk_size,
            created_at=utcnow(),
            status=FileStatus.UPLOADING,
        )

        chunks: List[Chunk] = []
        if payloads:
            try:
                chunks = await self.distributor.distribute(payloads, self.providers, file_id=file.file_id)
            except DistributionError as e:
                logger.error(f"Upload failed for file {file_name}: {e}")
                if e.stored_chunks:
                    await self._cleanup_chunks(e.stored_chunks)
                raise

        try:
            with get_db_connection() as conn:
                try:
                    self.file_repo.save_file(file, conn=conn)
                    self.chunk_repo.save_chunks(chunks, conn=conn)
                    file.status = FileStatus.COMPLETED
                    self.file_repo.save_file(file, conn=conn)
                    conn.commit()
                except Exception:
                    conn.rollback()
                    raise
        except Exception as e:
            file.status = FileStatus.UPLOADING
            logger.error(f"Failed to persist metadata for file {file_name}: {e}", exc_info=True)
            if chunks:
                await self._cleanup_chunks(chunks)
            if isinstance(e, sqlite3.Error):
                raise StorageIOError(f"Failed to persist metadata for file {file_name}: {e}") from e
            raise

        file.chunks = chunks
        logger.info(
            f"File upload completed: {file_name} [file_id={file.file_id}, chunks={len(chunks)}, "
            f"chunk_size={chunk_size}]"
        )
        return file

    async def download_file(self, file_id: str, output_path: Union[str, Path]) -> bool:
        """
        Reassemble a file at output_path, overwriting anything there.

        Chunks are verified while collected and the written file is verified
        again as a whole; on a whole-file mismatch the output is removed.

        Returns:
            True on success, False on any failure
        """
        output = Path(output_path)
        try:
            file = self._load_file(file_id)
            if file is None or file.status == FileStatus.DELETED:
                logger.warning(f"File not found: {file_id}")
                return False

            logger.info(f"Starting file download: {file.name} [file_id={file_id}], output={output}")

            if len(file.chunks) != file.total_chunks:
                raise IntegrityFailureError(
                    f"File {file_id} expects {file.total_chunks} chunks, found {len(file.chunks)}"
                )

            payloads: List[ChunkPayload] = []
            if file.chunks:
                payloads = await self.distributor.collect(file.chunks, self.providers)

            await self._run(self._write_output, output, payloads)

            if not await self._run(verify_file_checksum, output, file.checksum):
                logger.error(f"File integrity verification failed after download: {file_id}")
                output.unlink(missing_ok=True)
                return False

            file.last_accessed_at = utcnow()
            self.file_repo.save_file(file)

            logger.info(f"File download completed: {file.name} [file_id={file_id}]")
            return True
        except Exception as e:
            logger.error(f"Failed to download file {file_id}: {e}", exc_info=True)
            return False

    @staticmethod
    def _write_output(output: Path, payloads: Sequence[ChunkPayload]) -> None:
        output.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(output, 'wb') as f:
                for payload in sorted(payloads, key=lambda p: p.sequence_number):
                    f.write(payload.data)
        except OSError:
            output.unlink(missing_ok=True)
            raise

    async def delete_file(self, file_id: str) -> bool:
        """
        Delete chunk payloads (best effort, concurrently) and mark the file Deleted.

        Returns:
            True if the file was marked Deleted, False if it was unknown,
            already deleted, or the metadata update failed
        """
        try:
            file = self._load_file(file_id)
            if file is None or file.status == FileStatus.DELETED:
                logger.warning(f"File not found for deletion: {file_id}")
                return False

            logger.info(f"Starting file deletion: {file.name} [file_id={file_id}]")

            outcomes = await self._fan_out(file.chunks, self._delete_chunk)
            failed = [chunk_id for chunk_id, ok in outcomes.items() if not ok]
            if failed:
                logger.warning(f"Could not delete {len(failed)}/{len(outcomes)} chunk payloads of file {file_id}")

            file.status = FileStatus.DELETED
            self.file_repo.save_file(file)

            logger.info(f"File deletion completed: {file.name} [file_id={file_id}]")
            return True
        except Exception as e:
            logger.error(f"Failed to delete file {file_id}: {e}", exc_info=True)
            return False

    async def verify_file_integrity(self, file_id: str) -> bool:
        """
        Re-read every chunk concurrently and check its checksum.

        Each chunk is marked Verified, Corrupted or Missing; the file is
        marked Corrupted if any chunk fails.

        Returns:
            True only if every chunk verified
        """
        try:
            file = self._load_file(file_id)
            if file is None or file.status == FileStatus.DELETED:
                logger.warning(f"File not found for integrity verification: {file_id}")
                return False

            logger.info(f"Starting file integrity verification: {file.name} [file_id={file_id}]")

            outcomes = await self._fan_out(file.chunks, self._verify_chunk)
            all_valid = all(outcomes.values()) and len(file.chunks) == file.total_chunks

            if not all_valid:
                file.status = FileStatus.CORRUPTED

            with get_db_connection() as conn:
                try:
                    self.chunk_repo.save_chunks(file.chunks, conn=conn)
                    self.file_repo.save_file(file, conn=conn)
                    conn.commit()
                except Exception:
                    conn.rollback()
                    raise

            logger.info(
                f"File integrity verification completed: {file.name} [file_id={file_id}], valid={all_valid}"
            )
            return all_valid
        except Exception as e:
            logger.error(f"Failed to verify file integrity {file_id}: {e}", exc_info=True)
            return False

    def get_file_metadata(self, file_id: str) -> Optional[File]:
        """
        Load a file descriptor with its chunks, None if unknown or malformed.
        """
        try:
            file = self._load_file(file_id)
        except InvalidInputError as e:
            logger.warning(str(e))
            return None

        if file is None:
            logger.warning(f"File metadata not found: {file_id}")
        return file

    def list_files(self) -> List[File]:
        files = self.file_repo.list_files()
        logger.debug(f"Listed {len(files)} files")
        return files

    async def check_providers(self) -> Dict[str, bool]:
        return await self.providers.check_health()

    async def _fan_out(
        self,
        chunks: Sequence[Chunk],
        operation: Callable[[Chunk], Awaitable[bool]]
    ) -> Dict[str, bool]:
        """
        Run operation for every chunk concurrently and gather all outcomes.

        One failing chunk never stops the others.
        """
        results = await asyncio.gather(*(operation(chunk) for chunk in chunks), return_exceptions=True)

        outcomes = {}
        for chunk, result in zip(chunks, results):
            if isinstance(result, BaseException):
                logger.error(f"Chunk operation failed for {chunk.chunk_id}: {result}")
                outcomes[chunk.chunk_id] = False
            else:
                outcomes[chunk.chunk_id] = bool(result)
        return outcomes

    async def _delete_chunk(self, chunk: Chunk) -> bool:
        try:
            provider = self.providers.get(chunk.provider_id)
            deleted = await provider.delete(chunk.chunk_id, chunk.storage_location)
            logger.debug(f"Deleted chunk {chunk.chunk_id} from provider {chunk.provider_id}: {deleted}")
            return deleted
        except Exception as e:
            logger.warning(f"Failed to delete chunk {chunk.chunk_id} from provider {chunk.provider_id}: {e}")
            return False

    async def _verify_chunk(self, chunk: Chunk) -> bool:
        try:
            provider = self.providers.get(chunk.provider_id)
        except ProviderUnavailableError as e:
            logger.warning(f"Storage provider not found for chunk {chunk.chunk_id}: {e}")
            chunk.status = ChunkStatus.MISSING
            return False

        try:
            data = await provider.retrieve(chunk.chunk_id, chunk.storage_location)
        except Exception as e:
            logger.error(f"Failed to verify chunk {chunk.chunk_id}: {e}")
            chunk.status = ChunkStatus.MISSING
            return False

        if not verify_checksum(data, chunk.checksum):
            logger.warning(f"Chunk integrity verification failed: {chunk.chunk_id}")
            chunk.status = ChunkStatus.CORRUPTED
            return False

        chunk.status = ChunkStatus.VERIFIED
        chunk.last_verified_at = utcnow()
        return True

    async def _cleanup_chunks(self, chunks: Sequence[Chunk]) -> List[str]:
        """
        Best-effort removal of payloads that have no committed metadata.

        Returns:
            Chunk ids that could not be deleted
        """
        logger.info(f"Cleaning up {len(chunks)} orphaned chunks")
        outcomes = await self._fan_out(chunks, self._delete_chunk)
        failed = [chunk_id for chunk_id, ok in outcomes.items() if not ok]
        if failed:
            logger.error(f"Failed to delete {len(failed)} orphaned chunks: {failed}")
        return failed
