"""
Flow Indexer Status Watch Mixin.

Follows transactions until they are sealed and keeps their stored
status up to date.
"""

import asyncio

from loguru import logger

from flowdex.services.flow_gateway.types import FlowTransactionStatus

from .mappers import create_status_entity


class StatusWatchMixin:
    """Mixin providing transaction finalization tracking."""

    def spawn_status_watchers(self, transaction_ids: list[str]) -> None:
        """Start a background watcher for every transaction not yet watched."""
        for transaction_id in transaction_ids:
            self.watchers.spawn(transaction_id, self.watch_transaction_status)

    async def watch_transaction_status(self, transaction_id: str) -> None:
        """
        Patch the stored status on every update until sealed.

        The subscription is always released, including on cancellation.
        """
        subscription = self.gateway.subscribe_to_transaction_status(transaction_id)

        async def on_update(status: FlowTransactionStatus) -> None:
            await self.transaction_index.update(
                transaction_id, status=create_status_entity(status)
            )

        unsubscribe = subscription.on_update(on_update)
        try:
            await subscription.once_sealed()
            logger.debug(f"[TxWatcher] Transaction {transaction_id[:16]}... sealed")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                f"[TxWatcher] Failed to wait for sealed status of "
                f"{transaction_id[:16]}...: {e}"
            )
        finally:
            unsubscribe()
