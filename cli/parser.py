"""Command parser for CLI input."""

import shlex

from controller.utils import is_valid_uuid
from cli.models import (
    CommandRequest,
    DeleteCommand,
    DownloadCommand,
    HealthCommand,
    InfoCommand,
    ListCommand,
    UploadCommand,
    VerifyCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]
    args = tokens[1:]

    if command_name == "upload":
        return _parse_upload(args)
    elif command_name == "download":
        return _parse_download(args)
    elif command_name == "list":
        return _parse_no_args("list", args, ListCommand)
    elif command_name == "info":
        return InfoCommand(file_id=_parse_file_id("info", args))
    elif command_name == "delete":
        return DeleteCommand(file_id=_parse_file_id("delete", args))
    elif command_name == "verify":
        return VerifyCommand(file_id=_parse_file_id("verify", args))
    elif command_name == "health":
        return _parse_no_args("health", args, HealthCommand)
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload <path> [name]' command."""
    if not 1 <= len(args) <= 2:
        raise ParseError("upload requires 1 or 2 arguments: <path> [name]")

    path = args[0]
    name = args[1] if len(args) > 1 else None
    return UploadCommand(path=path, name=name)


def _parse_download(args: list[str]) -> DownloadCommand:
    """Parse 'download <file_id> [output_path]' command."""
    if not 1 <= len(args) <= 2:
        raise ParseError("download requires 1 or 2 arguments: <file_id> [output_path]")

    file_id = _validate_file_id(args[0])
    output_path = args[1] if len(args) > 1 else None
    return DownloadCommand(file_id=file_id, output_path=output_path)


def _parse_file_id(command_name: str, args: list[str]) -> str:
    if len(args) != 1:
        raise ParseError(f"{command_name} requires exactly 1 argument: <file_id>")
    return _validate_file_id(args[0])


def _validate_file_id(value: str) -> str:
    if not is_valid_uuid(value):
        raise ParseError(f"Invalid file ID format: {value}")
    return value


def _parse_no_args(command_name: str, args: list[str], command_cls):
    if args:
        raise ParseError(f"{command_name} takes no arguments")
    return command_cls()
