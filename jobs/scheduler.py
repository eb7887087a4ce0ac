"""
Indexer process entry point.

Creates the index schema, then runs the indexer tick on a fixed interval
until the process is stopped.
"""

import asyncio
import signal
import sys

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from flowdex.config.database import async_engine, init_db
from flowdex.config.settings import settings
from flowdex.utils.logging import setup_logging
from jobs.health import register_components, start_health_server, stop_health_server
from jobs.tasks.flow_indexer_task import (
    get_flow_indexer,
    run_flow_indexer,
    shutdown_flow_indexer,
)

INDEXER_JOB_ID = "flow_indexer"


def create_scheduler() -> AsyncIOScheduler:
    """
    Create the scheduler with the indexer job registered.

    A tick that is still running when the next one is due makes the
    scheduler skip that run.
    """
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        run_flow_indexer,
        "interval",
        seconds=settings.indexer_poll_interval,
        id=INDEXER_JOB_ID,
        max_instances=1,
        coalesce=True,
    )
    return scheduler


async def main() -> None:
    """Run the indexer until SIGINT/SIGTERM."""
    setup_logging()
    logger.info(
        f"Starting flowdex indexer ({settings.environment}) "
        f"against {settings.flow_gateway_url}"
    )

    await init_db()

    indexer = get_flow_indexer()
    scheduler = create_scheduler()
    scheduler.start()
    register_components(scheduler, indexer)

    health_runner = None
    try:
        health_runner = await start_health_server(port=settings.health_check_port)
    except OSError as e:
        logger.warning(f"Failed to start health check server: {e}")

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # add_signal_handler is unavailable on Windows
            pass

    logger.success("Indexer started")
    try:
        await stop_event.wait()
    finally:
        logger.info("Shutting down indexer...")
        scheduler.shutdown(wait=False)
        await shutdown_flow_indexer()
        if health_runner is not None:
            await stop_health_server(health_runner)
        await async_engine.dispose()
        logger.success("Indexer stopped")


def run() -> None:
    """Console entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Indexer stopped by user (KeyboardInterrupt)")
    except Exception as e:
        logger.exception(f"Indexer crashed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
