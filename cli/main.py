"""CLI entry point."""

import sys
import os

from common.logging_config import setup_logging
from cli.commands import close_client
from cli.repl import repl_loop


def main() -> None:
    """Entry point for CLI."""
    log_level = 'DEBUG' if '--debug' in sys.argv else os.getenv('LOG_LEVEL', 'WARNING')

    # Module loggers live under these package names.
    for component in ('common', 'tracker', 'storage', 'bigfile'):
        setup_logging(component, log_level=log_level)
    logger = setup_logging('cli', log_level=log_level)

    if '--debug' in sys.argv:
        logger.info("Debug logging enabled")
        sys.argv.remove('--debug')

    logger.info("CLI starting...")
    try:
        repl_loop()
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise
    finally:
        close_client()
        logger.info("CLI exiting")


if __name__ == "__main__":
    main()
