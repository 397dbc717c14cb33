"""Bootstrap: load settings, prepare storage, and build the FileService."""

from pathlib import Path
from typing import List, Optional

from common.logging_config import get_logger
from controller.config import StorageSettings, load_settings
from controller.database import init_database
from controller.services.file_service import FileService
from storage.base_provider import StorageProvider
from storage.database_provider import DatabaseStorageProvider
from storage.filesystem_provider import FileSystemStorageProvider

logger = get_logger(__name__)


def create_providers(settings: StorageSettings) -> List[StorageProvider]:
    """
    Build the registered provider list. Order drives round-robin placement.
    """
    return [
        FileSystemStorageProvider(settings.file_system_storage_root),
        DatabaseStorageProvider(),
    ]


def ensure_storage_directories(settings: StorageSettings) -> None:
    for directory in (settings.file_system_storage_root, settings.file_system_download_root):
        path = Path(directory)
        if not path.exists():
            path.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created directory: {path}")


async def bootstrap(settings: Optional[StorageSettings] = None) -> FileService:
    """
    Initialize the system and return a ready FileService.

    Unhealthy providers are logged but stay registered, since chunks
    already placed on them must remain addressable.
    """
    logger.info("Initializing system...")

    if settings is None:
        settings = load_settings()

    ensure_storage_directories(settings)
    init_database()

    service = FileService(create_providers(settings), settings)
    logger.info(f"Registered storage providers: {', '.join(service.providers.ids())}")

    health = await service.check_providers()
    for provider_id, is_healthy in health.items():
        if is_healthy:
            logger.info(f"Storage provider {provider_id} is healthy")
        else:
            logger.warning(f"Storage provider {provider_id} failed its health check")

    logger.info("System initialization completed successfully")
    return service
