"""Chunk payload rows used by the database storage provider."""

from typing import Optional

from common.logging_config import get_logger
from controller.database import get_db_connection
from controller.utils import utcnow

logger = get_logger(__name__)


class ChunkDataRepository:
    @staticmethod
    def insert(chunk_id: str, data: bytes) -> None:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO chunk_data (chunk_id, data, created_at) VALUES (?, ?, ?)",
                (chunk_id, data, utcnow().isoformat())
            )
            conn.commit()

    @staticmethod
    def get_data(chunk_id: str) -> Optional[bytes]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT data FROM chunk_data WHERE chunk_id = ?", (chunk_id,))
            row = cursor.fetchone()
            return bytes(row["data"]) if row is not None else None

    @staticmethod
    def delete(chunk_id: str) -> bool:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM chunk_data WHERE chunk_id = ?", (chunk_id,))
            conn.commit()
            return cursor.rowcount > 0

    @staticmethod
    def exists(chunk_id: str) -> bool:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1 FROM chunk_data WHERE chunk_id = ?", (chunk_id,))
            return cursor.fetchone() is not None

    @staticmethod
    def ping() -> bool:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            return cursor.fetchone()[0] == 1
