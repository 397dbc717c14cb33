"""Shared data type definitions (statuses, ChunkPayload)."""

from dataclasses import dataclass
from enum import Enum


class FileStatus(str, Enum):
    """Lifecycle of a stored file."""
    UPLOADING = "Uploading"
    COMPLETED = "Completed"
    CORRUPTED = "Corrupted"
    DELETED = "Deleted"


class ChunkStatus(str, Enum):
    """Lifecycle of a stored chunk."""
    PENDING = "Pending"
    STORED = "Stored"
    VERIFIED = "Verified"
    CORRUPTED = "Corrupted"
    MISSING = "Missing"


@dataclass(frozen=True)
class ChunkPayload:
    """
    Raw bytes of one chunk plus its checksum.

    Only lives in memory between splitting and storing, or between
    retrieval and reassembly.
    """
    chunk_id: str
    sequence_number: int
    data: bytes
    checksum: str

    @property
    def size(self) -> int:
        return len(self.data)
