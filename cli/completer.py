"""Completer for the ChunkVault CLI: command names, local paths and stored file IDs."""

from typing import Callable, Iterable, List, Optional, Tuple

from prompt_toolkit.completion import Completer, Completion, PathCompleter
from prompt_toolkit.document import Document

from cli.constants import COMMANDS

FILE_ID_COMMANDS = ("download", "info", "delete", "verify")

FileIdSource = Callable[[], Iterable[Tuple[str, str]]]


class ChunkVaultCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Local path completion for the 'upload' command
    - Stored file ID completion for commands taking a file ID
    """

    def __init__(self, file_id_source: Optional[FileIdSource] = None):
        """
        Args:
            file_id_source: Callable returning (file_id, name) pairs of stored
                files; file ID completion is disabled without one
        """
        self.file_id_source = file_id_source
        self._path_completer = PathCompleter(expanduser=True)

    def get_completions(self, document: Document, complete_event) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        command = tokens[0].lower()
        current_word = "" if is_typing_new_token else tokens[-1]
        arg_index = len(tokens) - 1 if is_typing_new_token else len(tokens) - 2

        if arg_index != 0:
            return

        if command == "upload":
            yield from self._complete_paths(current_word, complete_event)
        elif command in FILE_ID_COMMANDS:
            yield from self._complete_file_ids(current_word)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_paths(self, partial: str, complete_event) -> Iterable[Completion]:
        yield from self._path_completer.get_completions(Document(partial, len(partial)), complete_event)

    def _complete_file_ids(self, partial: str) -> Iterable[Completion]:
        if self.file_id_source is None:
            return

        try:
            candidates: List[Tuple[str, str]] = list(self.file_id_source())
        except Exception:
            # completion must never break the prompt
            return

        for file_id, name in candidates:
            if file_id.startswith(partial.lower()):
                yield Completion(file_id, start_position=-len(partial), display_meta=name)
