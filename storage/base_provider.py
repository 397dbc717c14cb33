"""Storage provider contract shared by every chunk backend."""

from abc import ABC, abstractmethod


class StorageProvider(ABC):
    """
    Backend capable of storing, retrieving and deleting chunk payloads.

    provider_id is persisted on every chunk descriptor as the routing key,
    so it must never change once chunks reference it. Implementations must
    tolerate concurrent calls for different chunks.
    """

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Stable routing key."""

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human readable provider name."""

    @abstractmethod
    async def store(self, chunk_id: str, data: bytes) -> str:
        """
        Store chunk payload.

        Args:
            chunk_id: UUID of the chunk
            data: Raw chunk bytes

        Returns:
            Opaque location token the caller persists verbatim

        Raises:
            StorageIOError: If the write fails
        """

    @abstractmethod
    async def retrieve(self, chunk_id: str, storage_location: str) -> bytes:
        """
        Read chunk payload.

        Raises:
            NotFoundError: If the location token does not resolve
            StorageIOError: If the read fails
        """

    @abstractmethod
    async def delete(self, chunk_id: str, storage_location: str) -> bool:
        """
        Delete chunk payload.

        Returns:
            True if a payload was removed, False if nothing was found
        """

    @abstractmethod
    async def exists(self, chunk_id: str, storage_location: str) -> bool:
        """Check whether the payload behind the location token exists."""

    @abstractmethod
    async def health_check(self) -> bool:
        """Cheap read/write round-trip. Never raises."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.provider_id!r}>"
