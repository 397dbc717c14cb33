"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["upload", "download", "list", "info", "delete", "verify", "health", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#2FA4E7 bold",
        "command": "#0088ff bold",
    }
)

BLUE = "\033[38;2;47;164;231m"
GREEN = "\033[32m"
RED = "\033[31m"
RESET = "\033[0m"

LOGO = f"""{BLUE}
  ____ _                 _  __     __          _ _
 / ___| |__  _   _ _ __ | | \\ \\   / /_ _ _   _| | |_
| |   | '_ \\| | | | '_ \\| |/ /\\ \\ / / _` | | | | | __|
| |___| | | | |_| | | | |   <  \\ V / (_| | |_| | | |_
 \\____|_| |_|\\__,_|_| |_|_|\\_\\  \\_/ \\__,_|\\__,_|_|\\__|
{RESET}"""

WELCOME_TITLE = "ChunkVault CLI - Chunked File Storage"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "chunkvault> "

HELP_TEXT = """Available commands:
  upload <path> [name]                Upload a file (name defaults to the file name)
  download <file_id> [output_path]    Download a file (defaults to the download folder)
  list                                List stored files, newest first
  info <file_id>                      Show file metadata and chunk placement
  delete <file_id>                    Delete a file and its chunks
  verify <file_id>                    Verify integrity of every chunk of a file
  health                              Check storage provider health
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL

Examples:
  upload photos/mangal.jpg
  upload report.pdf quarterly-report.pdf
  download 3f1c2a9e-0d6b-4a57-9a41-1f1e2b6c7d88
  verify 3f1c2a9e-0d6b-4a57-9a41-1f1e2b6c7d88"""
