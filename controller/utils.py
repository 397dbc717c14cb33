"""Utility helper functions for the Controller."""

import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

MIME_TYPES = {
    ".txt": "text/plain",
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xls": "application/vnd.ms-excel",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".zip": "application/zip",
    ".rar": "application/x-rar-compressed",
}

DEFAULT_MIME_TYPE = "application/octet-stream"


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def is_valid_uuid(value: Optional[str]) -> bool:
    """
    Check whether a string is a well-formed UUID.
    """
    if not isinstance(value, str):
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def utcnow() -> datetime:
    """
    Current time as a timezone-aware UTC datetime.
    """
    return datetime.now(timezone.utc)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def from_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def get_mime_type(file_name: str) -> str:
    """
    Classify a file by its extension.

    Args:
        file_name: Display name or path of the file

    Returns:
        MIME type string, application/octet-stream when unknown
    """
    extension = Path(file_name).suffix.lower()
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)
