"""Exception hierarchy shared by storage providers and the controller."""


class ChunkVaultError(Exception):
    """
    Base exception class for all ChunkVault errors.
    """
    pass


class NotFoundError(ChunkVaultError):
    """
    Raised when a source file, chunk payload or metadata record is absent.
    """
    pass


class IntegrityFailureError(ChunkVaultError):
    """
    Raised when a checksum does not match, for a chunk or a whole file.
    """
    pass


class ProviderUnavailableError(ChunkVaultError):
    """
    Raised when a chunk references a provider id that is not registered.
    """
    pass


class InvalidInputError(ChunkVaultError):
    """
    Raised for empty chunk/provider lists and malformed identifiers.
    """
    pass


class StorageIOError(ChunkVaultError):
    """
    Raised when an underlying read, write or storage call fails.
    """
    pass


class DistributionError(StorageIOError):
    """
    Raised when storing a chunk fails part way through a distribution.

    The descriptors of chunks already written before the failure are kept on
    ``stored_chunks`` so the caller can clean them up.
    """

    def __init__(self, message: str, stored_chunks=None):
        super().__init__(message)
        self.stored_chunks = list(stored_chunks or [])


class ConfigurationError(ChunkVaultError):
    """
    Raised when the settings file cannot be read or fails validation.
    """
    pass
