"""
Health check server for the indexer process.

Reports scheduler state together with indexer progress over HTTP.
"""

import asyncio

from aiohttp import web
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from flowdex.services.flow_indexer import FlowIndexerService

# Monitored components, registered at startup
_scheduler: AsyncIOScheduler | None = None
_indexer: FlowIndexerService | None = None


def register_components(
    scheduler: AsyncIOScheduler | None,
    indexer: FlowIndexerService | None,
) -> None:
    """
    Register the scheduler and indexer instances for health checks.

    Args:
        scheduler: Scheduler driving indexer ticks
        indexer: Indexer service
    """
    global _scheduler, _indexer
    _scheduler = scheduler
    _indexer = indexer
    logger.info("[Health] Components registered for health checks")


def _indexer_status() -> dict:
    if _indexer is None:
        return {"registered": False}
    return {
        "registered": True,
        "processing": _indexer.is_processing,
        "last_processed_height": _indexer.last_processed_height,
        "active_watchers": len(_indexer.watchers),
    }


async def health_handler(request: web.Request) -> web.Response:
    """
    Health check endpoint.

    Returns:
        JSON response with scheduler and indexer status
    """
    if _scheduler is None:
        return web.json_response(
            {"status": "unhealthy", "error": "Scheduler not initialized"},
            status=503,
        )

    jobs = [
        {
            "id": job.id,
            "next_run_time": (
                job.next_run_time.isoformat() if job.next_run_time else None
            ),
        }
        for job in _scheduler.get_jobs()
    ]
    running = _scheduler.running

    return web.json_response(
        {
            "status": "healthy" if running else "stopped",
            "scheduler_running": running,
            "jobs": jobs,
            "indexer": _indexer_status(),
        },
        status=200 if running else 503,
    )


async def readiness_handler(request: web.Request) -> web.Response:
    """Ready once the scheduler runs and the indexer is registered."""
    ready = _scheduler is not None and _scheduler.running and _indexer is not None
    return web.json_response(
        {"status": "ready" if ready else "not_ready", "ready": ready},
        status=200 if ready else 503,
    )


async def liveness_handler(request: web.Request) -> web.Response:
    """Process is alive as long as it answers."""
    return web.json_response({"status": "alive", "alive": True})


def create_health_app() -> web.Application:
    """Build the health check application."""
    app = web.Application()
    app.router.add_get("/health", health_handler)
    app.router.add_get("/readiness", readiness_handler)
    app.router.add_get("/liveness", liveness_handler)
    return app


async def start_health_server(
    host: str = "0.0.0.0",
    port: int = 8081,
) -> web.AppRunner:
    """
    Start health check server.

    Args:
        host: Host to bind to
        port: Port to bind to

    Returns:
        AppRunner for cleanup
    """
    runner = web.AppRunner(create_health_app())
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info(f"[Health] Server started on http://{host}:{port}/health")
    return runner


async def stop_health_server(runner: web.AppRunner, timeout: int = 5) -> None:
    """
    Stop health check server gracefully.

    Args:
        runner: AppRunner to cleanup
        timeout: Maximum time to wait for cleanup in seconds
    """
    try:
        await asyncio.wait_for(runner.cleanup(), timeout=timeout)
        logger.info("[Health] Server stopped")
    except TimeoutError:
        logger.warning(f"[Health] Server cleanup timed out after {timeout}s")
