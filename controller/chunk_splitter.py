"""Chunk size selection and fixed-window file splitting."""

from pathlib import Path
from typing import BinaryIO, Iterator, List, Union

from common.constants import (
    LARGE_FILE_CHUNK_SIZE,
    LARGE_FILE_THRESHOLD,
    MEDIUM_FILE_THRESHOLD,
    SMALL_FILE_THRESHOLD,
)
from common.exceptions import InvalidInputError, NotFoundError, StorageIOError
from common.logging_config import get_logger
from common.types import ChunkPayload
from controller.config import StorageSettings
from controller.utils import generate_uuid
from storage.checksum_validator import compute_checksum

logger = get_logger(__name__)


def choose_chunk_size(file_size: int, settings: StorageSettings) -> int:
    """
    Pick a chunk size from the file size.

    Bands (inclusive upper bounds): up to 10 MiB uses min_chunk_size, up to
    100 MiB uses default_chunk_size, up to 500 MiB uses 5 MiB or
    default_chunk_size, whichever is larger, and anything larger uses
    max_chunk_size. The result is clamped into
    [min_chunk_size, max_chunk_size]. Never raises: on any error the
    default chunk size is returned.
    """
    try:
        if file_size <= SMALL_FILE_THRESHOLD:
            chunk_size = settings.min_chunk_size
        elif file_size <= MEDIUM_FILE_THRESHOLD:
            chunk_size = settings.default_chunk_size
        elif file_size <= LARGE_FILE_THRESHOLD:
            chunk_size = max(settings.default_chunk_size, LARGE_FILE_CHUNK_SIZE)
        else:
            chunk_size = settings.max_chunk_size

        chunk_size = max(settings.min_chunk_size, chunk_size)
        chunk_size = min(settings.max_chunk_size, chunk_size)

        logger.debug(f"Calculated chunk size for file size {file_size}: {chunk_size} bytes")
        return chunk_size
    except Exception as e:
        logger.error(f"Failed to calculate chunk size for file size {file_size}: {e}", exc_info=True)
        return settings.default_chunk_size


def iter_chunks(stream: BinaryIO, chunk_size: int) -> Iterator[ChunkPayload]:
    """
    Read a binary stream in chunk_size windows.

    Yields:
        ChunkPayload per window, sequence numbers starting at 0. The last
        window may be shorter.
    """
    sequence_number = 0

    while True:
        data = stream.read(chunk_size)
        if not data:
            break

        payload = ChunkPayload(
            chunk_id=generate_uuid(),
            sequence_number=sequence_number,
            data=data,
            checksum=compute_checksum(data),
        )
        logger.debug(
            f"Created chunk {sequence_number}: id={payload.chunk_id}, "
            f"size={payload.size} bytes, checksum={payload.checksum}"
        )

        yield payload
        sequence_number += 1


def split_file(file_path: Union[str, Path], chunk_size: int) -> List[ChunkPayload]:
    """
    Split a file into an ordered list of chunk payloads.

    Args:
        file_path: Source file
        chunk_size: Window size in bytes

    Returns:
        All chunks in sequence order (empty for an empty file)

    Raises:
        InvalidInputError: If chunk_size is not positive
        NotFoundError: If the source does not exist
        StorageIOError: If reading fails; no partial list is returned
    """
    if not isinstance(chunk_size, int) or chunk_size <= 0:
        raise InvalidInputError(f"Chunk size must be a positive integer, got {chunk_size!r}")

    path = Path(file_path)
    if not path.is_file():
        raise NotFoundError(f"File not found: {path}")

    logger.info(f"Starting file split: {path}, chunk_size={chunk_size} bytes")

    try:
        with open(path, 'rb') as f:
            chunks = list(iter_chunks(f, chunk_size))
    except OSError as e:
        logger.error(f"Failed to split file {path}: {e}", exc_info=True)
        raise StorageIOError(f"Failed to split file {path}: {e}") from e

    logger.info(f"File split completed: {path}, total_chunks={len(chunks)}")
    return chunks
