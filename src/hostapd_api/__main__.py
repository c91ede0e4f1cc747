"""Main entrypoint for hostapd-api."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys

from aiohttp import web

from hostapd_api.api import create_app
from hostapd_api.config import Config
from hostapd_api.engine import PresenceStore
from hostapd_api.ingest import ingest
from hostapd_api.logging import setup_logging
from hostapd_api.sources.logfile import LogFileSource, SourceError
from hostapd_api.watchdog import Watchdog

logger = logging.getLogger(__name__)


async def _cancel(task: asyncio.Future) -> None:
    if task.done():
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


async def _run(config: Config) -> int:
    store = PresenceStore()
    source = LogFileSource(config.file, poll_interval=config.poll_interval)

    # HTTP API
    runner = web.AppRunner(create_app(store))
    await runner.setup()
    site = web.TCPSite(runner, config.host, config.port)
    await site.start()
    logger.info("Listening on %s", config.listen)

    ingest_task = asyncio.create_task(
        ingest(source.tail(), store, program=config.program)
    )

    watchdog_task: asyncio.Task | None = None
    if config.watchdog is not None:
        watchdog = Watchdog(
            config.watchdog.url,
            store,
            period=config.watchdog.period,
            interval=config.watchdog.interval,
        )
        watchdog_task = asyncio.create_task(watchdog.run())

    # Graceful shutdown on SIGTERM/SIGINT
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("Shutdown signal received")
        stop_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _signal_handler)

    exit_code = 0
    stop_waiter = asyncio.ensure_future(stop_event.wait())
    try:
        done, _ = await asyncio.wait(
            {ingest_task, stop_waiter},
            return_when=asyncio.FIRST_COMPLETED,
        )
        if ingest_task in done:
            exc = ingest_task.exception()
            if exc is not None:
                if not isinstance(exc, SourceError):
                    raise exc
                logger.error("Log source failed: %s", exc)
                exit_code = 1
            else:
                logger.error("Log source ended unexpectedly")
                exit_code = 1
    finally:
        await source.stop()
        await _cancel(ingest_task)
        await _cancel(stop_waiter)
        if watchdog_task is not None:
            await _cancel(watchdog_task)
        await runner.cleanup()
        logger.info("Shutdown complete")

    return exit_code


def main() -> None:
    config = Config.load()
    setup_logging(level=config.log_level, json_logs=config.json_logs)
    try:
        sys.exit(asyncio.run(_run(config)))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
