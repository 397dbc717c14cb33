"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal, Optional, Union


@dataclass(frozen=True)
class UploadCommand:
    """Upload a local file."""

    path: str
    name: Optional[str] = None
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class DownloadCommand:
    """Download a file by ID."""

    file_id: str
    output_path: Optional[str] = None
    command: Literal["download"] = "download"


@dataclass(frozen=True)
class ListCommand:
    """List all stored files."""

    command: Literal["list"] = "list"


@dataclass(frozen=True)
class InfoCommand:
    """Show metadata and chunk placement of a file."""

    file_id: str
    command: Literal["info"] = "info"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete a file by ID."""

    file_id: str
    command: Literal["delete"] = "delete"


@dataclass(frozen=True)
class VerifyCommand:
    """Verify integrity of every chunk of a file."""

    file_id: str
    command: Literal["verify"] = "verify"


@dataclass(frozen=True)
class HealthCommand:
    """Run storage provider health checks."""

    command: Literal["health"] = "health"


CommandRequest = Union[
    UploadCommand,
    DownloadCommand,
    ListCommand,
    InfoCommand,
    DeleteCommand,
    VerifyCommand,
    HealthCommand,
]
