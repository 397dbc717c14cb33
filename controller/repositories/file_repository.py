"""File repository for database operations."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from common.logging_config import get_logger
from common.types import FileStatus
from controller.database import get_db_connection
from controller.repositories.chunk_repository import Chunk, ChunkRepository
from controller.utils import from_iso, to_iso, utcnow

logger = get_logger(__name__)

FILE_COLUMNS = (
    "file_id, name, size, mime_type, checksum, total_chunks, chunk_size, "
    "created_at, last_accessed_at, status"
)


@dataclass
class File:
    file_id: str
    name: str
    size: int
    mime_type: str
    checksum: str
    total_chunks: int
    chunk_size: int
    created_at: datetime = field(default_factory=utcnow)
    last_accessed_at: Optional[datetime] = None
    status: FileStatus = FileStatus.UPLOADING
    chunks: List[Chunk] = field(default_factory=list)


def _row_to_file(row) -> File:
    return File(
        file_id=row["file_id"],
        name=row["name"],
        size=row["size"],
        mime_type=row["mime_type"],
        checksum=row["checksum"],
        total_chunks=row["total_chunks"],
        chunk_size=row["chunk_size"],
        created_at=from_iso(row["created_at"]),
        last_accessed_at=from_iso(row["last_accessed_at"]),
        status=FileStatus(row["status"]),
    )


class FileRepository:
    @staticmethod
    def save_file(file: File, conn=None) -> File:
        """
        Insert a file descriptor or update its mutable columns.

        Chunks attached to the File object are not written; use
        ChunkRepository.save_chunks for those.
        """
        should_close = conn is None
        if conn is None:
            conn = get_db_connection().__enter__()

        try:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                INSERT INTO files ({FILE_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(file_id) DO UPDATE SET
                    name = excluded.name,
                    last_accessed_at = excluded.last_accessed_at,
                    status = excluded.status
                """,
                (
                    file.file_id,
                    file.name,
                    file.size,
                    file.mime_type,
                    file.checksum,
                    file.total_chunks,
                    file.chunk_size,
                    to_iso(file.created_at),
                    to_iso(file.last_accessed_at),
                    FileStatus(file.status).value,
                )
            )
            if should_close:
                conn.commit()
            logger.debug(f"Saved file [file_id={file.file_id}, status={FileStatus(file.status).value}]")
            return file
        except Exception as e:
            logger.error(f"Failed to save file [file_id={file.file_id}]: {e}", exc_info=True)
            raise
        finally:
            if should_close:
                conn.close()

    @staticmethod
    def get_by_id(file_id: str, conn=None) -> Optional[File]:
        if conn is not None:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {FILE_COLUMNS} FROM files WHERE file_id = ?", (file_id,))
            row = cursor.fetchone()
            return _row_to_file(row) if row is not None else None

        with get_db_connection() as conn:
            return FileRepository.get_by_id(file_id, conn=conn)

    @staticmethod
    def get_with_chunks(file_id: str) -> Optional[File]:
        """
        Load a file descriptor together with its chunks in sequence order.
        """
        with get_db_connection() as conn:
            file = FileRepository.get_by_id(file_id, conn=conn)
            if file is None:
                return None
            file.chunks = ChunkRepository.get_chunks_by_file(file_id, conn=conn)
            return file

    @staticmethod
    def find_by_checksum(checksum: str, conn=None) -> Optional[File]:
        """
        Find a non-deleted file carrying exactly this whole-file checksum.
        """
        query = (
            f"SELECT {FILE_COLUMNS} FROM files "
            "WHERE checksum = ? AND status != ? ORDER BY created_at LIMIT 1"
        )
        params = (checksum.lower(), FileStatus.DELETED.value)

        if conn is not None:
            cursor = conn.cursor()
            cursor.execute(query, params)
            row = cursor.fetchone()
            return _row_to_file(row) if row is not None else None

        with get_db_connection() as conn:
            return FileRepository.find_by_checksum(checksum, conn=conn)

    @staticmethod
    def list_files() -> List[File]:
        """
        List non-deleted files, newest first.
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {FILE_COLUMNS} FROM files WHERE status != ? ORDER BY created_at DESC",
                (FileStatus.DELETED.value,)
            )
            return [_row_to_file(row) for row in cursor.fetchall()]
