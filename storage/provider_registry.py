"""Registry of storage providers keyed by their stable provider id."""

import asyncio
from typing import Dict, Iterable, List

from common.exceptions import InvalidInputError, ProviderUnavailableError
from common.logging_config import get_logger
from storage.base_provider import StorageProvider

logger = get_logger(__name__)


class ProviderRegistry:
    """
    Ordered set of storage providers.

    Order is registration order and drives round-robin placement. The set is
    treated as read-only while pipeline operations are in flight.
    """

    def __init__(self, providers: Iterable[StorageProvider] = ()):
        self._providers: Dict[str, StorageProvider] = {}
        for provider in providers:
            self.register(provider)

    def register(self, provider: StorageProvider) -> None:
        """
        Add a provider.

        Raises:
            InvalidInputError: If a provider with the same id is already registered
        """
        if provider.provider_id in self._providers:
            raise InvalidInputError(f"Storage provider already registered: {provider.provider_id}")
        self._providers[provider.provider_id] = provider
        logger.info(f"Registered storage provider {provider.provider_id} ({provider.display_name})")

    def get(self, provider_id: str) -> StorageProvider:
        """
        Resolve a provider id.

        Raises:
            ProviderUnavailableError: If no provider has this id
        """
        provider = self._providers.get(provider_id)
        if provider is None:
            raise ProviderUnavailableError(f"Storage provider not found: {provider_id}")
        return provider

    def all(self) -> List[StorageProvider]:
        return list(self._providers.values())

    def ids(self) -> List[str]:
        return list(self._providers.keys())

    async def check_health(self) -> Dict[str, bool]:
        """
        Probe every provider concurrently.

        Returns:
            Mapping of provider id to health flag
        """
        providers = self.all()
        results = await asyncio.gather(
            *(provider.health_check() for provider in providers),
            return_exceptions=True
        )

        health = {}
        for provider, result in zip(providers, results):
            is_healthy = result is True
            if not is_healthy:
                logger.warning(f"Storage provider {provider.provider_id} is unhealthy: {result}")
            health[provider.provider_id] = is_healthy
        return health
