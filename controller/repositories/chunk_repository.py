"""Chunk repository for database operations."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from common.logging_config import get_logger
from common.types import ChunkStatus
from controller.database import get_db_connection
from controller.utils import from_iso, to_iso, utcnow

logger = get_logger(__name__)

CHUNK_COLUMNS = (
    "chunk_id, file_id, sequence_number, size, checksum, provider_id, "
    "storage_location, created_at, last_verified_at, status"
)


@dataclass
class Chunk:
    chunk_id: str
    file_id: Optional[str]
    sequence_number: int
    size: int
    checksum: str
    provider_id: str
    storage_location: str
    created_at: datetime = field(default_factory=utcnow)
    last_verified_at: Optional[datetime] = None
    status: ChunkStatus = ChunkStatus.PENDING


def _row_to_chunk(row) -> Chunk:
    return Chunk(
        chunk_id=row["chunk_id"],
        file_id=row["file_id"],
        sequence_number=row["sequence_number"],
        size=row["size"],
        checksum=row["checksum"],
        provider_id=row["provider_id"],
        storage_location=row["storage_location"],
        created_at=from_iso(row["created_at"]),
        last_verified_at=from_iso(row["last_verified_at"]),
        status=ChunkStatus(row["status"]),
    )


class ChunkRepository:
    @staticmethod
    def save_chunks(chunks: List[Chunk], conn=None) -> None:
        """
        Insert or update chunk descriptors.

        When conn is given the caller owns the commit.
        """
        if not chunks:
            return

        logger.debug(f"Saving {len(chunks)} chunks for file_id={chunks[0].file_id}")
        should_close = conn is None
        if conn is None:
            conn = get_db_connection().__enter__()

        try:
            cursor = conn.cursor()
            for chunk in chunks:
                cursor.execute(
                    f"""
                    INSERT INTO chunks ({CHUNK_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(chunk_id) DO UPDATE SET
                        last_verified_at = excluded.last_verified_at,
                        status = excluded.status
                    """,
                    (
                        chunk.chunk_id,
                        chunk.file_id,
                        chunk.sequence_number,
                        chunk.size,
                        chunk.checksum,
                        chunk.provider_id,
                        chunk.storage_location,
                        to_iso(chunk.created_at),
                        to_iso(chunk.last_verified_at),
                        ChunkStatus(chunk.status).value,
                    )
                )
            if should_close:
                conn.commit()
            logger.debug(f"Saved {len(chunks)} chunks successfully")
        except Exception as e:
            logger.error(f"Failed to save chunks: {e}", exc_info=True)
            raise
        finally:
            if should_close:
                conn.close()

    @staticmethod
    def get_chunks_by_file(file_id: str, conn=None) -> List[Chunk]:
        if conn is not None:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {CHUNK_COLUMNS} FROM chunks WHERE file_id = ? ORDER BY sequence_number",
                (file_id,)
            )
            return [_row_to_chunk(row) for row in cursor.fetchall()]

        with get_db_connection() as conn:
            return ChunkRepository.get_chunks_by_file(file_id, conn=conn)
