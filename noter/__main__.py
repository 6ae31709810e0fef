"""
Noter Backend: Command-Line Entry Point
=========================================

What:  `noter` console script and `python -m noter`.
How:   Load settings, configure logging, run the Server until SIGINT/SIGTERM.
       Any startup failure (bad configuration, unreachable database, failed
       migration) is logged and the process exits with status 1.
"""

import asyncio
import logging
import sys

from noter.config import load_settings
from noter.exceptions import NoterError
from noter.main import setup_logging
from noter.server import Server

logger = logging.getLogger("noter")


def main() -> None:
    try:
        settings = load_settings()
    except NoterError as e:
        setup_logging()
        logger.error("Configuration error: %s", str(e))
        sys.exit(1)

    setup_logging(settings.log_level)
    server = Server(settings)
    try:
        asyncio.run(server.serve())
    except NoterError as e:
        logger.error("Fatal %s error during %s: %s", e.kind.value, e.operation or "startup", str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
