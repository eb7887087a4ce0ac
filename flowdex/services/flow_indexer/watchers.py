"""
Transaction watcher registry.

Supervises background status watchers, one per transaction id, so that
shutdown can cancel and drain all of them.
"""

import asyncio
from collections.abc import Awaitable, Callable

from loguru import logger

from flowdex.config.constants import WATCHER_SHUTDOWN_TIMEOUT


class TransactionWatcherRegistry:
    """Background watcher tasks keyed by transaction id."""

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task] = {}

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, transaction_id: object) -> bool:
        return transaction_id in self._tasks

    def spawn(
        self,
        transaction_id: str,
        watcher: Callable[[str], Awaitable[None]],
    ) -> asyncio.Task | None:
        """
        Start a watcher unless one is already running for the transaction.

        Args:
            transaction_id: Watched transaction
            watcher: Coroutine function receiving the transaction id

        Returns:
            Started task, or None if the transaction is already watched
        """
        if transaction_id in self._tasks:
            return None

        task = asyncio.create_task(
            watcher(transaction_id), name=f"tx-watcher-{transaction_id[:16]}"
        )
        self._tasks[transaction_id] = task
        task.add_done_callback(
            lambda finished: self._handle_task_done(transaction_id, finished)
        )
        return task

    def _handle_task_done(self, transaction_id: str, task: asyncio.Task) -> None:
        """Drop finished watcher and report unexpected failures."""
        if self._tasks.get(transaction_id) is task:
            del self._tasks[transaction_id]

        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                f"[TxWatcher] Watcher for {transaction_id[:16]}... crashed: {exc}"
            )

    def cancel(self, transaction_id: str) -> bool:
        """
        Cancel the watcher of one transaction.

        Returns:
            True if a running watcher was cancelled
        """
        task = self._tasks.get(transaction_id)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    async def join(self, timeout: float | None = None) -> bool:
        """
        Wait for the running watchers to finish on their own.

        Returns:
            True if all of them finished within the timeout
        """
        tasks = list(self._tasks.values())
        if not tasks:
            return True
        _, pending = await asyncio.wait(tasks, timeout=timeout)
        return not pending

    async def shutdown(self, timeout: float = WATCHER_SHUTDOWN_TIMEOUT) -> None:
        """Cancel all watchers and wait for their cleanup to finish."""
        tasks = list(self._tasks.values())
        if not tasks:
            return

        logger.info(f"[TxWatcher] Cancelling {len(tasks)} transaction watchers")
        for task in tasks:
            task.cancel()

        _, pending = await asyncio.wait(tasks, timeout=timeout)
        if pending:
            logger.warning(
                f"[TxWatcher] {len(pending)} watchers did not stop in {timeout}s"
            )
        self._tasks.clear()
