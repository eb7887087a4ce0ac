"""
Flow Indexer Background Task.

Runs one indexer tick per scheduler invocation:
1. Skip when the gateway is offline
2. Bootstrap well known accounts
3. Process every unprocessed block height in order

Ticks never overlap; a tick started while the previous one is still
running returns immediately.
"""

import asyncio

from loguru import logger

from flowdex.config.constants import WATCHER_GRACE_PERIOD
from flowdex.config.database import async_session_maker
from flowdex.services.flow_indexer import FlowIndexerService

_indexer: FlowIndexerService | None = None


def get_flow_indexer() -> FlowIndexerService:
    """
    Get the process wide indexer, creating it on first use.

    Returns:
        FlowIndexerService backed by the application database
    """
    global _indexer
    if _indexer is None:
        _indexer = FlowIndexerService.from_session_maker(async_session_maker)
    return _indexer


def set_flow_indexer(indexer: FlowIndexerService | None) -> None:
    """Replace the process wide indexer."""
    global _indexer
    _indexer = indexer


async def run_flow_indexer() -> dict:
    """
    Main indexer task - processes new blocks.

    Returns:
        Dict with tick results
    """
    results = {
        "success": False,
        "last_processed_height": None,
        "active_watchers": 0,
        "errors": [],
    }

    try:
        indexer = get_flow_indexer()
        await indexer.process_blockchain_data()

        results["last_processed_height"] = indexer.last_processed_height
        results["active_watchers"] = len(indexer.watchers)
        results["success"] = True

    except asyncio.CancelledError:
        logger.info("[Indexer Task] Task cancelled")
        raise
    except Exception as e:
        logger.exception(f"[Indexer Task] Task failed: {e}")
        results["errors"].append(str(e))

    return results


async def shutdown_flow_indexer() -> None:
    """Drain watchers and close the gateway session of the indexer."""
    global _indexer
    if _indexer is None:
        return

    indexer, _indexer = _indexer, None
    await indexer.shutdown(grace_period=WATCHER_GRACE_PERIOD)
    await indexer.gateway.close()
