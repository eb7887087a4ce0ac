"""
Flow Indexer Persistence Mixin.

Stores the entities derived from one block height.
"""

import asyncio
from collections.abc import Awaitable
from typing import Any

from loguru import logger

from flowdex.services.flow_gateway.types import FlowEvent
from flowdex.utils.exceptions import BlockPersistenceError

from .block_fetching_mixin import BlockData, TransactionData
from .mappers import (
    create_block_entity,
    create_event_entity,
    create_transaction_entity,
)


async def run_isolated(awaitable: Awaitable[Any], description: str) -> bool:
    """
    Await one item-level operation; log and swallow its failure.

    Returns:
        True if the operation succeeded
    """
    try:
        await awaitable
        return True
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.error(f"[Indexer] Failed to {description}: {e}")
        return False


class PersistenceMixin:
    """Mixin providing entity persistence for one block."""

    async def process_block_data(self, data: BlockData) -> None:
        """
        Store block, transactions and events and dispatch events.

        The four groups run concurrently. Transaction, event and dispatch
        failures are isolated per item; a failure to store the block itself
        is raised once every group has settled.

        Raises:
            BlockPersistenceError: If the block entity could not be stored
        """
        block = data.block

        block_result, *_ = await asyncio.gather(
            self._store_block(data),
            asyncio.gather(
                *(
                    run_isolated(
                        self._store_transaction(data, transaction_data),
                        f"store transaction {transaction_data.transaction.id}",
                    )
                    for transaction_data in data.transactions
                )
            ),
            asyncio.gather(
                *(
                    run_isolated(
                        self._store_event(event),
                        f"store event {event.transaction_id}.{event.event_index}",
                    )
                    for event in data.events
                )
            ),
            asyncio.gather(
                *(
                    run_isolated(
                        self.process_event(event),
                        f"handle event {event.type} "
                        f"({event.transaction_id}.{event.event_index})",
                    )
                    for event in data.events
                )
            ),
            return_exceptions=True,
        )

        if isinstance(block_result, BaseException):
            if isinstance(block_result, asyncio.CancelledError):
                raise block_result
            raise BlockPersistenceError(block.height, block_result) from block_result

    async def _store_block(self, data: BlockData) -> None:
        await self.block_index.upsert(**create_block_entity(data.block))

    async def _store_event(self, event: FlowEvent) -> None:
        await self.event_index.upsert(**create_event_entity(event))

    async def _store_transaction(
        self, data: BlockData, transaction_data: TransactionData
    ) -> None:
        transaction = transaction_data.transaction

        parsed = await self.script_parser.parse(transaction.script)
        if not parsed.is_ok:
            logger.warning(
                f"[Indexer] Failed to parse script of transaction "
                f"{transaction.id}: {parsed.error}"
            )

        await self.transaction_index.upsert(
            **create_transaction_entity(
                data.block, transaction, transaction_data.status, parsed
            )
        )
