"""Configuration settings for the ChunkVault controller."""

import json
import os
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError, model_validator

from common.constants import (
    DEFAULT_CHUNK_SIZE_BYTES,
    DEFAULT_DATABASE_PATH,
    DEFAULT_DOWNLOAD_ROOT,
    DEFAULT_LOG_DIR,
    DEFAULT_SETTINGS_FILE,
    DEFAULT_STORAGE_ROOT,
    MAX_CHUNK_SIZE_BYTES,
    MIN_CHUNK_SIZE_BYTES,
)
from common.exceptions import ConfigurationError


DATABASE_PATH = os.environ.get("CHUNKVAULT_DATABASE_PATH", DEFAULT_DATABASE_PATH)

SETTINGS_PATH = os.environ.get("CHUNKVAULT_SETTINGS_PATH", DEFAULT_SETTINGS_FILE)

LOG_DIR = os.environ.get("CHUNKVAULT_LOG_DIR", DEFAULT_LOG_DIR)


class StorageSettings(BaseModel):
    """Chunk sizing bounds and storage locations."""
    default_chunk_size: int = Field(DEFAULT_CHUNK_SIZE_BYTES, gt=0)
    min_chunk_size: int = Field(MIN_CHUNK_SIZE_BYTES, gt=0)
    max_chunk_size: int = Field(MAX_CHUNK_SIZE_BYTES, gt=0)
    file_system_storage_root: str = DEFAULT_STORAGE_ROOT
    file_system_download_root: str = DEFAULT_DOWNLOAD_ROOT

    @model_validator(mode="after")
    def check_chunk_bounds(self) -> "StorageSettings":
        if not self.min_chunk_size <= self.default_chunk_size <= self.max_chunk_size:
            raise ValueError(
                "chunk sizes must satisfy min_chunk_size <= default_chunk_size <= max_chunk_size"
            )
        return self


def load_settings(settings_path: Optional[Union[str, Path]] = None) -> StorageSettings:
    """
    Load storage settings from a JSON file.

    The file may hold the settings at top level or under a "storage" key.
    A missing file yields the defaults.

    Args:
        settings_path: Path to the JSON file (defaults to SETTINGS_PATH)

    Returns:
        Validated StorageSettings

    Raises:
        ConfigurationError: If the file is unreadable or fails validation
    """
    path = Path(settings_path or SETTINGS_PATH)
    if not path.exists():
        return StorageSettings()

    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise ConfigurationError(f"Cannot read settings file {path}: {e}") from e

    if isinstance(data, dict) and isinstance(data.get("storage"), dict):
        data = data["storage"]

    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must contain a JSON object")

    try:
        return StorageSettings(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings in {path}: {e}") from e
