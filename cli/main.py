"""CLI entry point."""

import argparse
import os

from common.exceptions import ChunkVaultError
from common.logging_config import setup_logging
from controller.config import LOG_DIR
from cli.repl import repl_loop


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="chunkvault", description="ChunkVault interactive shell")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    parser.add_argument("--log-dir", default=LOG_DIR, help="directory for the cli.log file")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    """Entry point for CLI."""
    args = parse_args(argv)
    log_level = 'DEBUG' if args.debug else os.getenv('LOG_LEVEL', 'WARNING')

    logger = setup_logging('cli', log_level=log_level, log_dir=args.log_dir)
    logger.info("ChunkVault CLI starting")

    try:
        repl_loop()
    except ChunkVaultError as e:
        logger.error(f"CLI startup failed: {e}", exc_info=True)
        print(f"Error: {e}")
        raise SystemExit(1)
    finally:
        logger.info("CLI exiting")


if __name__ == "__main__":
    main()
