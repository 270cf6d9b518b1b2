"""Process lifespan: open the store at startup, dispose it at shutdown.

Single place for startup/shutdown logic. ``run`` is the entry point for
scripts: it builds the Database, runs the given coroutine, and on normal
exit, on SIGINT and on SIGTERM disposes the engine before returning.
"""

import asyncio
import logging
import signal
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from usermgmt.core.config import Settings, get_settings
from usermgmt.infrastructure.persistence.database import Database
from usermgmt.shared.logging import setup_logging

logger = logging.getLogger(__name__)

_SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


@asynccontextmanager
async def database_lifespan(settings: Settings | None = None) -> AsyncIterator[Database]:
    """Create the Database from settings; dispose it on exit (including errors)."""
    settings = settings or get_settings()
    database = Database.from_settings(settings)
    logger.info("Database opened (backend=%s)", database.backend)
    try:
        yield database
    finally:
        await database.dispose()


async def _run(
    main: Callable[[Database], Awaitable[int | None]], settings: Settings
) -> int:
    loop = asyncio.get_running_loop()
    async with database_lifespan(settings) as database:
        task = asyncio.create_task(main(database))

        def _on_signal(signum: int) -> None:
            logger.info("Received %s, shutting down", signal.Signals(signum).name)
            task.cancel()

        installed: list[int] = []
        for sig in _SHUTDOWN_SIGNALS:
            try:
                loop.add_signal_handler(sig, _on_signal, sig)
                installed.append(sig)
            except NotImplementedError:
                logger.debug("Signal handlers not supported on this platform")
        try:
            return (await task) or 0
        except asyncio.CancelledError:
            # Interrupted by a shutdown signal: a clean exit.
            return 0
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)


def run(
    main: Callable[[Database], Awaitable[int | None]],
    settings: Settings | None = None,
) -> int:
    """Configure logging, run main(database) and return its exit code (0 on signal)."""
    settings = settings or get_settings()
    setup_logging(settings)
    return asyncio.run(_run(main, settings))
