"""REPL with prompt_toolkit for user interaction."""

import os
import sys
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory

from cli.commands import (
    get_service,
    handle_delete,
    handle_download,
    handle_health,
    handle_info,
    handle_list,
    handle_upload,
    handle_verify,
)
from cli.completer import ChunkVaultCompleter
from cli.constants import HELP_TEXT, LOGO, PROMPT_TEXT, STYLE, WELCOME_HELP, WELCOME_TITLE
from cli.models import (
    DeleteCommand,
    DownloadCommand,
    HealthCommand,
    InfoCommand,
    ListCommand,
    UploadCommand,
    VerifyCommand,
)
from cli.parser import ParseError, parse_command
from common.logging_config import get_logger
from controller.services.file_service import FileService

logger = get_logger(__name__)

HANDLERS = {
    UploadCommand: handle_upload,
    DownloadCommand: handle_download,
    ListCommand: handle_list,
    InfoCommand: handle_info,
    DeleteCommand: handle_delete,
    VerifyCommand: handle_verify,
    HealthCommand: handle_health,
}


def clear_screen() -> None:
    """Clear the terminal screen (cross-platform)."""
    if sys.platform == "win32":
        os.system("cls")
    else:
        os.system("clear")


def show_welcome() -> None:
    print(LOGO)
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


def dispatch_command(cmd_obj, service: Optional[FileService] = None) -> str:
    """Dispatch parsed command to appropriate handler."""
    handler = HANDLERS.get(type(cmd_obj))
    if handler is None:
        return f"Unknown command type: {type(cmd_obj)}"
    return handler(cmd_obj, service)


def stored_file_ids(service: FileService):
    return [(file.file_id, file.name) for file in service.list_files()]


def repl_loop(service: Optional[FileService] = None) -> None:
    """
    Start interactive REPL with prompt_toolkit.

    The service is bootstrapped before the first prompt so that file ID
    completion works from the start.
    """
    if service is None:
        service = get_service()

    session: PromptSession = PromptSession(
        completer=ChunkVaultCompleter(lambda: stored_file_ids(service)),
        history=InMemoryHistory(),
        style=STYLE,
    )

    clear_screen()
    show_welcome()

    while True:
        try:
            user_input = session.prompt([("class:prompt", PROMPT_TEXT)]).strip()
        except KeyboardInterrupt:
            continue
        except EOFError:
            print("\nGoodbye!")
            break

        if not user_input:
            continue
        if user_input == "exit":
            print("Goodbye!")
            break
        if user_input == "help":
            print(HELP_TEXT)
            continue
        if user_input == "clear":
            clear_screen()
            show_welcome()
            continue

        try:
            cmd_obj = parse_command(user_input)
        except ParseError as e:
            print(f"Error: {e}")
            continue

        logger.debug(f"Dispatching {cmd_obj}")
        print(dispatch_command(cmd_obj, service))
