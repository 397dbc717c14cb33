"""Command handler functions for CLI operations."""

import asyncio
from pathlib import Path
from typing import Optional

from common.exceptions import ChunkVaultError
from common.logging_config import get_logger
from common.types import FileStatus
from cli.constants import GREEN, RED, RESET
from cli.models import (
    DeleteCommand,
    DownloadCommand,
    HealthCommand,
    InfoCommand,
    ListCommand,
    UploadCommand,
    VerifyCommand,
)
from cli.utils import format_file_size, format_timestamp
from controller.main import bootstrap
from controller.services.file_service import FileService

logger = get_logger(__name__)


_service: Optional[FileService] = None


def get_service() -> FileService:
    """
    Get or create global FileService instance.

    Returns:
        FileService instance
    """
    global _service
    if _service is None:
        logger.debug("Bootstrapping FileService instance")
        _service = asyncio.run(bootstrap())
    return _service


def _success(message: str) -> str:
    return f"{GREEN}{message}{RESET}"


def _failure(message: str) -> str:
    return f"{RED}{message}{RESET}"


def handle_upload(cmd: UploadCommand, service: Optional[FileService] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with path and optional display name
        service: Optional FileService for dependency injection (testing)

    Returns:
        Success or error message with upload details
    """
    logger.info(f"Executing upload command: path={cmd.path} name={cmd.name}")
    if not Path(cmd.path).is_file():
        return _failure("File not found or invalid path.")

    if service is None:
        service = get_service()

    try:
        file = asyncio.run(service.upload_file(cmd.path, cmd.name))
    except ChunkVaultError as e:
        logger.error(f"Upload command failed: {e}")
        return _failure(f"Upload failed: {e}")

    return _success(
        "File uploaded successfully!\n"
        f"File ID: {file.file_id}\n"
        f"File Name: {file.name}\n"
        f"File Size: {file.size:,} bytes\n"
        f"Total Chunks: {file.total_chunks}\n"
        f"Chunk Size: {file.chunk_size:,} bytes\n"
        f"Checksum: {file.checksum}"
    )


def handle_download(cmd: DownloadCommand, service: Optional[FileService] = None) -> str:
    """
    Handle 'download' command.

    Args:
        cmd: DownloadCommand with file_id and optional output_path
        service: Optional FileService for dependency injection (testing)

    Returns:
        Success or error message
    """
    logger.info(f"Executing download command: file_id={cmd.file_id} output_path={cmd.output_path}")
    if service is None:
        service = get_service()

    file = service.get_file_metadata(cmd.file_id)
    if file is None or file.status != FileStatus.COMPLETED:
        return _failure("File not found.")

    output_path = cmd.output_path or str(Path(service.settings.file_system_download_root) / file.name)

    if asyncio.run(service.download_file(cmd.file_id, output_path)):
        return _success(f"File downloaded successfully to: {output_path}")
    return _failure("Failed to download file.")


def handle_list(cmd: ListCommand, service: Optional[FileService] = None) -> str:
    """
    Handle 'list' command.

    Returns:
        Formatted table of files
    """
    if service is None:
        service = get_service()

    files = service.list_files()
    if not files:
        return _failure("No files found.")

    lines = [
        f"{'ID':<36} {'Name':<30} {'Size':<12} {'Chunks':<8} {'Status':<10} {'Uploaded':<20}",
        "-" * 120,
    ]
    for file in files:
        lines.append(
            f"{file.file_id:<36} {file.name[:30]:<30} {format_file_size(file.size):<12} "
            f"{file.total_chunks:<8} {file.status.value:<10} {format_timestamp(file.created_at):<20}"
        )
    return "\n".join(lines)


def handle_info(cmd: InfoCommand, service: Optional[FileService] = None) -> str:
    """
    Handle 'info' command.

    Returns:
        File metadata followed by one line per chunk
    """
    if service is None:
        service = get_service()

    file = service.get_file_metadata(cmd.file_id)
    if file is None:
        return _failure("File not found.")

    lines = [
        f"File ID: {file.file_id}",
        f"File Name: {file.name}",
        f"MIME Type: {file.mime_type}",
        f"File Size: {file.size:,} bytes ({format_file_size(file.size)})",
        f"Status: {file.status.value}",
        f"Total Chunks: {file.total_chunks}",
        f"Chunk Size: {file.chunk_size:,} bytes",
        f"Checksum: {file.checksum}",
        f"Uploaded: {format_timestamp(file.created_at)}",
        f"Last Accessed: {format_timestamp(file.last_accessed_at)}",
    ]
    for chunk in file.chunks:
        lines.append(
            f"  #{chunk.sequence_number:<5} {chunk.provider_id:<12} {format_file_size(chunk.size):<12} "
            f"{chunk.status.value:<10} verified={format_timestamp(chunk.last_verified_at)}"
        )
    return "\n".join(lines)


def handle_delete(cmd: DeleteCommand, service: Optional[FileService] = None) -> str:
    """
    Handle 'delete' command.

    Returns:
        Success or error message
    """
    logger.info(f"Executing delete command: file_id={cmd.file_id}")
    if service is None:
        service = get_service()

    file = service.get_file_metadata(cmd.file_id)
    if file is None or file.status == FileStatus.DELETED:
        return _failure("File not found.")

    if asyncio.run(service.delete_file(cmd.file_id)):
        return _success(f"File '{file.name}' deleted successfully.")
    return _failure("Failed to delete file.")


def handle_verify(cmd: VerifyCommand, service: Optional[FileService] = None) -> str:
    """
    Handle 'verify' command.

    Returns:
        Verification result message
    """
    logger.info(f"Executing verify command: file_id={cmd.file_id}")
    if service is None:
        service = get_service()

    file = service.get_file_metadata(cmd.file_id)
    if file is None or file.status == FileStatus.DELETED:
        return _failure("File not found.")

    if asyncio.run(service.verify_file_integrity(cmd.file_id)):
        return _success("File integrity verification passed. All chunks are valid.")
    return _failure("File integrity verification failed. Some chunks may be corrupted or missing.")


def handle_health(cmd: HealthCommand, service: Optional[FileService] = None) -> str:
    """
    Handle 'health' command.

    Returns:
        One line per provider
    """
    if service is None:
        service = get_service()

    health = asyncio.run(service.check_providers())
    lines = []
    for provider_id, is_healthy in health.items():
        status = _success("healthy") if is_healthy else _failure("unhealthy")
        lines.append(f"{provider_id}: {status}")
    return "\n".join(lines)
