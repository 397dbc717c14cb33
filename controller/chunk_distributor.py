"""Round-robin chunk placement across storage providers and verified collection."""

from typing import Dict, List, Optional, Sequence, Union

from common.exceptions import (
    DistributionError,
    IntegrityFailureError,
    InvalidInputError,
    ProviderUnavailableError,
)
from common.logging_config import get_logger
from common.types import ChunkPayload, ChunkStatus
from controller.repositories.chunk_repository import Chunk
from controller.utils import utcnow
from storage.base_provider import StorageProvider
from storage.checksum_validator import verify_checksum
from storage.provider_registry import ProviderRegistry

logger = get_logger(__name__)

ProviderSet = Union[Sequence[StorageProvider], ProviderRegistry]


def _as_list(providers: Optional[ProviderSet]) -> List[StorageProvider]:
    if providers is None:
        return []
    if isinstance(providers, ProviderRegistry):
        return providers.all()
    return list(providers)


def select_provider_index(sequence: int, provider_count: int, start_index: int = 0) -> int:
    """
    Round-robin placement: the Nth chunk goes to provider (start_index + N) mod count.
    """
    if provider_count <= 0:
        raise InvalidInputError("Storage providers list cannot be empty")
    return (start_index + sequence) % provider_count


class ChunkDistributor:
    """
    Stores chunks on providers in input order and reads them back with
    per-chunk checksum verification.

    Placement ignores provider identity and load; only list order matters.
    """

    async def distribute(
        self,
        payloads: Sequence[ChunkPayload],
        providers: ProviderSet,
        file_id: Optional[str] = None,
        start_index: int = 0
    ) -> List[Chunk]:
        """
        Store every payload, one at a time, rotating over the providers.

        Args:
            payloads: Chunks from the splitter, in sequence order
            providers: Ordered provider list (or registry)
            file_id: Owning file id stamped on the descriptors
            start_index: Rotation counter value for the first chunk

        Returns:
            Chunk descriptors with status Stored, in input order

        Raises:
            InvalidInputError: If payloads or providers are empty
            DistributionError: If any store call fails; chunks already stored
                are listed on the exception and are not rolled back here
        """
        provider_list = _as_list(providers)
        if not payloads:
            raise InvalidInputError("Chunks list cannot be empty")
        if not provider_list:
            raise InvalidInputError("Storage providers list cannot be empty")

        logger.info(
            f"Starting chunk storage: total_chunks={len(payloads)}, providers={len(provider_list)}"
        )

        stored: List[Chunk] = []
        for position, payload in enumerate(payloads):
            provider = provider_list[select_provider_index(position, len(provider_list), start_index)]

            try:
                storage_location = await provider.store(payload.chunk_id, payload.data)
            except Exception as e:
                logger.error(
                    f"Failed to store chunk {payload.chunk_id} using provider {provider.provider_id}: {e}",
                    exc_info=True
                )
                raise DistributionError(
                    f"Failed to store chunk {payload.sequence_number} on {provider.provider_id}: {e}",
                    stored_chunks=stored
                ) from e

            chunk = Chunk(
                chunk_id=payload.chunk_id,
                file_id=file_id,
                sequence_number=payload.sequence_number,
                size=payload.size,
                checksum=payload.checksum,
                provider_id=provider.provider_id,
                storage_location=storage_location,
                created_at=utcnow(),
                status=ChunkStatus.STORED,
            )
            stored.append(chunk)

            logger.debug(
                f"Stored chunk {chunk.sequence_number} using provider {provider.provider_id}: {storage_location}"
            )

        logger.info(f"Chunk storage completed: {len(stored)} chunks stored")
        return stored

    async def collect(self, chunks: Sequence[Chunk], providers: ProviderSet) -> List[ChunkPayload]:
        """
        Retrieve chunks in ascending sequence order, verifying each checksum.

        Raises:
            InvalidInputError: If chunks or providers are empty
            ProviderUnavailableError: If a chunk names an unregistered provider
            NotFoundError: If a provider cannot resolve a location token
            IntegrityFailureError: If retrieved bytes do not match the recorded checksum
        """
        provider_list = _as_list(providers)
        if not chunks:
            raise InvalidInputError("Chunks list cannot be empty")
        if not provider_list:
            raise InvalidInputError("Storage providers list cannot be empty")

        provider_lookup: Dict[str, StorageProvider] = {p.provider_id: p for p in provider_list}

        logger.info(f"Starting chunk retrieval: total_chunks={len(chunks)}")

        retrieved: List[ChunkPayload] = []
        for chunk in sorted(chunks, key=lambda c: c.sequence_number):
            provider = provider_lookup.get(chunk.provider_id)
            if provider is None:
                raise ProviderUnavailableError(f"Storage provider not found: {chunk.provider_id}")

            try:
                data = await provider.retrieve(chunk.chunk_id, chunk.storage_location)
            except Exception as e:
                logger.error(
                    f"Failed to retrieve chunk {chunk.chunk_id} from provider {chunk.provider_id}: {e}"
                )
                raise

            if not verify_checksum(data, chunk.checksum):
                logger.error(f"Chunk integrity verification failed: {chunk.chunk_id}")
                raise IntegrityFailureError(f"Chunk integrity verification failed: {chunk.chunk_id}")

            retrieved.append(ChunkPayload(
                chunk_id=chunk.chunk_id,
                sequence_number=chunk.sequence_number,
                data=data,
                checksum=chunk.checksum,
            ))

            logger.debug(
                f"Retrieved chunk {chunk.sequence_number} from provider {provider.provider_id}: "
                f"size={len(data)} bytes"
            )

        logger.info(f"Chunk retrieval completed: {len(retrieved)} chunks retrieved")
        return retrieved
