"""Project-wide constants (chunk size bands, provider ids, defaults)."""

KIB: int = 1024
MIB: int = 1024 * 1024

DEFAULT_CHUNK_SIZE_BYTES: int = 1 * MIB
MIN_CHUNK_SIZE_BYTES: int = 64 * KIB
MAX_CHUNK_SIZE_BYTES: int = 10 * MIB

# Upper bounds (inclusive) of the chunk sizing bands
SMALL_FILE_THRESHOLD: int = 10 * MIB
MEDIUM_FILE_THRESHOLD: int = 100 * MIB
LARGE_FILE_THRESHOLD: int = 500 * MIB
LARGE_FILE_CHUNK_SIZE: int = 5 * MIB

STREAM_PIECE_SIZE: int = 64 * KIB

FILESYSTEM_PROVIDER_ID: str = "FileSystem"
DATABASE_PROVIDER_ID: str = "Database"

CHUNK_FILE_SUFFIX: str = ".chunk"

DEFAULT_STORAGE_ROOT: str = "./storages"
DEFAULT_DOWNLOAD_ROOT: str = "./downloads"
DEFAULT_DATABASE_PATH: str = "./data/metadata.db"
DEFAULT_SETTINGS_FILE: str = "appsettings.json"
DEFAULT_LOG_DIR: str = "logs"
