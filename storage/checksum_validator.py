"""Provides SHA-256 checksum calculation and verification helpers."""

import hashlib
from pathlib import Path
from typing import BinaryIO, Optional, Union

from common.constants import STREAM_PIECE_SIZE
from common.exceptions import NotFoundError, StorageIOError
from common.logging_config import get_logger

logger = get_logger(__name__)


def compute_checksum(data: bytes) -> str:
    """
    Compute SHA-256 checksum for given data.

    Args:
        data: Bytes to compute checksum for

    Returns:
        Lowercase hexadecimal string representation of SHA-256 hash
    """
    checksum = hashlib.sha256(data).hexdigest()
    logger.debug(f"Computed checksum for {len(data)} bytes: {checksum}")
    return checksum


def verify_checksum(data: bytes, expected: Optional[str]) -> bool:
    """
    Verify that data matches expected checksum.

    Args:
        data: Bytes to verify
        expected: Expected SHA-256 checksum (hex string, any case)

    Returns:
        True if checksum matches, False otherwise
    """
    if not expected:
        return False
    actual = compute_checksum(data)
    return actual == expected.lower()


class IncrementalChecksumCalculator:
    """
    Calculate SHA-256 checksum incrementally for streaming data.

    Usage:
        calculator = IncrementalChecksumCalculator()
        calculator.update(piece1)
        calculator.update(piece2)
        final_checksum = calculator.finalize()
    """

    def __init__(self):
        """Initialize a new incremental checksum calculator."""
        self._hasher = hashlib.sha256()
        self._finalized = False
        self.bytes_seen = 0

    def update(self, data: bytes) -> None:
        """
        Update checksum with new data.

        Args:
            data: Bytes to add to checksum calculation
        """
        if self._finalized:
            raise ValueError("Cannot update after finalization")
        self._hasher.update(data)
        self.bytes_seen += len(data)

    def finalize(self) -> str:
        """
        Finalize checksum calculation and return result.

        Returns:
            Hexadecimal string representation of SHA-256 hash
        """
        self._finalized = True
        return self._hasher.hexdigest()


def compute_stream_checksum(stream: BinaryIO, piece_size: int = STREAM_PIECE_SIZE) -> str:
    """
    Compute SHA-256 checksum of a readable binary stream without loading it whole.

    Args:
        stream: Open binary stream, read from its current position to EOF
        piece_size: Bytes read per iteration

    Returns:
        Same value compute_checksum would return for the concatenated bytes

    Raises:
        StorageIOError: If reading the stream fails
    """
    calculator = IncrementalChecksumCalculator()
    try:
        while True:
            piece = stream.read(piece_size)
            if not piece:
                break
            calculator.update(piece)
    except OSError as e:
        raise StorageIOError(f"Failed to read stream for checksum: {e}") from e
    checksum = calculator.finalize()
    logger.debug(f"Computed stream checksum over {calculator.bytes_seen} bytes: {checksum}")
    return checksum


def compute_file_checksum(file_path: Union[str, Path]) -> str:
    """
    Compute SHA-256 checksum of a file on disk.

    Raises:
        NotFoundError: If the file does not exist
        StorageIOError: If the file cannot be read
    """
    path = Path(file_path)
    if not path.is_file():
        raise NotFoundError(f"File not found: {path}")

    try:
        with open(path, 'rb') as f:
            checksum = compute_stream_checksum(f)
    except OSError as e:
        raise StorageIOError(f"Failed to read {path}: {e}") from e

    logger.debug(f"Calculated checksum for file {path}: {checksum}")
    return checksum


def verify_file_checksum(file_path: Union[str, Path], expected: Optional[str]) -> bool:
    """
    Verify that a file on disk matches expected checksum.

    Unreadable files are reported as a mismatch rather than raised.
    """
    try:
        actual = compute_file_checksum(file_path)
    except (NotFoundError, StorageIOError) as e:
        logger.error(f"Failed to verify checksum for file {file_path}: {e}")
        return False

    is_valid = bool(expected) and actual == expected.lower()
    logger.debug(
        f"Checksum verification for file {file_path}: "
        f"expected={expected}, actual={actual}, valid={is_valid}"
    )
    return is_valid
