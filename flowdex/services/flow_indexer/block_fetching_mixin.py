"""
Flow Indexer Block Fetching Mixin.

Assembles the complete data set of one block height.
"""

import asyncio
from dataclasses import dataclass, field, replace

from loguru import logger

from flowdex.services.flow_gateway.types import (
    FlowBlock,
    FlowCollection,
    FlowEvent,
    FlowTransaction,
    FlowTransactionStatus,
)


@dataclass
class TransactionData:
    """Transaction body with its execution result."""

    transaction: FlowTransaction
    status: FlowTransactionStatus


@dataclass
class BlockData:
    """Fully resolved data of one block height."""

    block: FlowBlock
    collections: list[FlowCollection] = field(default_factory=list)
    transactions: list[TransactionData] = field(default_factory=list)
    events: list[FlowEvent] = field(default_factory=list)


class BlockFetchingMixin:
    """Mixin providing block data assembly."""

    async def get_block_data(self, height: int) -> BlockData:
        """
        Fetch block, collections, transactions, statuses and events.

        Any failed request propagates and aborts the height.

        Args:
            height: Block height

        Returns:
            BlockData
        """
        block = await self.gateway.get_block_by_height(height)

        collections = list(
            await asyncio.gather(
                *(
                    self.gateway.get_collection_by_id(guarantee["collection_id"])
                    for guarantee in block.collection_guarantees
                )
            )
        )

        transaction_ids = [
            transaction_id
            for collection in collections
            for transaction_id in collection.transaction_ids
        ]
        transactions, statuses = await asyncio.gather(
            asyncio.gather(
                *(self.gateway.get_transaction_by_id(tx_id) for tx_id in transaction_ids)
            ),
            asyncio.gather(
                *(
                    self.gateway.get_transaction_status_by_id(tx_id)
                    for tx_id in transaction_ids
                )
            ),
        )

        transaction_data = [
            TransactionData(transaction=transaction, status=status)
            for transaction, status in zip(transactions, statuses)
        ]
        events = [
            replace(
                event,
                transaction_id=data.transaction.id,
                block_id=data.transaction.reference_block_id,
            )
            for data in transaction_data
            for event in data.status.events
        ]

        logger.debug(
            f"[Indexer] Fetched block #{height}: {len(collections)} collections, "
            f"{len(transaction_data)} transactions, {len(events)} events"
        )

        return BlockData(
            block=block,
            collections=collections,
            transactions=transaction_data,
            events=events,
        )
