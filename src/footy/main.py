"""Application entry point."""

import asyncio
import logging
import signal
import sys

from footy.api.server import run_server
from footy.config import get_config
from footy.db import get_pool
from footy.db.pool import close_pool
from footy.db.schema.migrate import migrate

logger = logging.getLogger(__name__)


async def boot(shutdown_event: asyncio.Event) -> None:
    """
    Boot sequence: load config → initialize pool → migrate → serve → shutdown.

    Raises:
        SystemExit: On configuration or database errors
    """
    try:
        config = get_config()
        logger.info(f"Configuration loaded: env={config.env}")

        await get_pool()
        applied = await migrate()
        logger.info(f"Database ready ({applied} migration(s) applied)")
    except Exception as e:
        logger.error(f"Boot sequence failed: {e}")
        await close_pool()
        raise SystemExit(1) from e

    try:
        await run_server(shutdown_event)
    finally:
        await close_pool()
        logger.info("Application shutdown complete")


def main() -> None:
    """Main entry point with logging configuration."""
    config = get_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    async def _serve():
        shutdown_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, shutdown_event.set)
        await boot(shutdown_event)

    try:
        asyncio.run(_serve())
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        sys.exit(0)
    except SystemExit:
        raise
    except Exception as e:
        logging.error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
