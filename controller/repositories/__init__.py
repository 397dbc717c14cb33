"""Repository layer for data access."""

from controller.repositories.file_repository import File, FileRepository
from controller.repositories.chunk_repository import Chunk, ChunkRepository
from controller.repositories.chunk_data_repository import ChunkDataRepository

__all__ = [
    "File",
    "FileRepository",
    "Chunk",
    "ChunkRepository",
    "ChunkDataRepository",
]
