"""
Flow Indexer Core Service.

Main service class that combines all indexer functionality.
Inherits from mixins to provide block fetching, persistence, event
dispatch, status tracking and account bootstrap.
"""

import asyncio
from dataclasses import dataclass

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from flowdex.repositories import (
    AccountContractRepository,
    AccountKeyRepository,
    AccountRepository,
    AccountStorageRepository,
    BlockRepository,
    EventRepository,
    ResourceIndex,
    TransactionRepository,
)
from flowdex.services.account_storage_service import (
    AccountStorageService,
    FullStorageReindexer,
    StorageReindexStrategy,
)
from flowdex.services.flow_gateway.client import FlowGatewayService
from flowdex.services.interactions import CadenceScriptParser
from flowdex.utils.entity_diff import EntitiesDiff

from .block_fetching_mixin import BlockFetchingMixin
from .event_dispatch_mixin import EventDispatchMixin
from .mappers import create_key_entity, ensure_prefixed_address
from .persistence_mixin import PersistenceMixin, run_isolated
from .status_watch_mixin import StatusWatchMixin
from .watchers import TransactionWatcherRegistry
from .well_known_mixin import WellKnownAccountsMixin


@dataclass
class UnprocessedBlocksInfo:
    """Height range the next tick has to process (both ends inclusive)."""

    next_height: int
    latest_height: int

    @property
    def is_empty(self) -> bool:
        """Check if the index is up to date."""
        return self.next_height > self.latest_height


class FlowIndexerService(
    BlockFetchingMixin,
    PersistenceMixin,
    EventDispatchMixin,
    StatusWatchMixin,
    WellKnownAccountsMixin,
):
    """
    Synchronizes chain state into the local index.

    Each tick processes all unprocessed heights strictly in order; a
    height is fully stored before the next one is fetched. Ticks never
    overlap.

    Usage:
        indexer = FlowIndexerService.from_session_maker(async_session_maker)
        await indexer.process_blockchain_data()
        await indexer.shutdown()
    """

    def __init__(
        self,
        gateway: FlowGatewayService,
        script_parser: CadenceScriptParser,
        block_index: ResourceIndex,
        transaction_index: ResourceIndex,
        event_index: ResourceIndex,
        account_index: ResourceIndex,
        key_index: ResourceIndex,
        contract_index: ResourceIndex,
        storage_reindexer: StorageReindexStrategy,
    ):
        """
        Initialize indexer.

        Args:
            gateway: Flow gateway client
            script_parser: Parser labelling transaction arguments
            block_index: Block index (must provide get_latest_block)
            transaction_index: Transaction index
            event_index: Event index
            account_index: Account index
            key_index: Account key index
            contract_index: Account contract index
            storage_reindexer: Strategy keeping account storage up to date
        """
        self.gateway = gateway
        self.script_parser = script_parser
        self.block_index = block_index
        self.transaction_index = transaction_index
        self.event_index = event_index
        self.account_index = account_index
        self.key_index = key_index
        self.contract_index = contract_index
        self.storage_reindexer = storage_reindexer

        self.watchers = TransactionWatcherRegistry()
        self._tick_lock = asyncio.Lock()
        self._last_processed_height: int | None = None

    @classmethod
    def from_session_maker(
        cls,
        session_maker: async_sessionmaker[AsyncSession],
        gateway: FlowGatewayService | None = None,
    ) -> "FlowIndexerService":
        """
        Build an indexer backed by the SQLAlchemy repositories.

        Args:
            session_maker: Async session factory
            gateway: Gateway client (defaults to one built from settings)
        """
        gateway = gateway or FlowGatewayService()
        account_index = AccountRepository(session_maker)

        return cls(
            gateway=gateway,
            script_parser=CadenceScriptParser(),
            block_index=BlockRepository(session_maker),
            transaction_index=TransactionRepository(session_maker),
            event_index=EventRepository(session_maker),
            account_index=account_index,
            key_index=AccountKeyRepository(session_maker),
            contract_index=AccountContractRepository(session_maker),
            storage_reindexer=FullStorageReindexer(
                AccountStorageService(gateway),
                account_index,
                AccountStorageRepository(session_maker),
            ),
        )

    @property
    def last_processed_height(self) -> int | None:
        """Height of the last block processed by this instance."""
        return self._last_processed_height

    @property
    def is_processing(self) -> bool:
        """Check if a tick is running."""
        return self._tick_lock.locked()

    async def process_blockchain_data(self) -> None:
        """
        Run one indexer tick.

        Never raises; all failures are logged. A tick started while the
        previous one is still running returns immediately.
        """
        if self._tick_lock.locked():
            logger.debug("[Indexer] Previous tick still running, skipping")
            return

        async with self._tick_lock:
            try:
                await self._run_tick()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception(f"[Indexer] Tick failed: {e}")

    async def _run_tick(self) -> None:
        if not await self.gateway.is_reachable():
            logger.debug("[Indexer] Gateway is not reachable, skipping tick")
            return

        # Both settle before the tick ends so no work outlives the tick gate
        blocks_info, _ = await asyncio.gather(
            self.get_unprocessed_blocks_info(),
            run_isolated(
                self.maybe_process_well_known_accounts(),
                "bootstrap well known accounts",
            ),
            return_exceptions=True,
        )
        if isinstance(blocks_info, BaseException):
            raise blocks_info
        if blocks_info.is_empty:
            return

        logger.debug(
            f"[Indexer] Processing blocks "
            f"{blocks_info.next_height}..{blocks_info.latest_height}"
        )

        for height in range(blocks_info.next_height, blocks_info.latest_height + 1):
            if not await self._process_height(height):
                # Retried from the same height on the next tick
                break

    async def _process_height(self, height: int) -> bool:
        """
        Fetch and store one height.

        Returns:
            True if the height is complete
        """
        try:
            data = await self.get_block_data(height)
            persisted, _ = await asyncio.gather(
                self.process_block_data(data),
                run_isolated(
                    self.re_index_all_account_storage(),
                    "re-index account storage",
                ),
                return_exceptions=True,
            )
            if isinstance(persisted, BaseException):
                raise persisted
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"[Indexer] Failed to process block #{height}: {e}")
            return False

        self.spawn_status_watchers(
            [transaction_data.transaction.id for transaction_data in data.transactions]
        )
        self._last_processed_height = height
        return True

    async def get_unprocessed_blocks_info(self) -> UnprocessedBlocksInfo:
        """
        Compute the height range missing from the index.

        Returns:
            Range from the height after the last indexed block up to the
            latest sealed chain height
        """
        last_indexed, latest = await asyncio.gather(
            self.block_index.get_latest_block(),
            self.gateway.get_latest_block(),
        )
        next_height = last_indexed.height + 1 if last_indexed is not None else 0
        return UnprocessedBlocksInfo(
            next_height=next_height, latest_height=latest.height
        )

    async def re_index_all_account_storage(self) -> None:
        """Bring the storage of all indexed accounts up to date."""
        await self.storage_reindexer.reindex_all()

    async def refresh_account_keys(self, address: str) -> EntitiesDiff:
        """
        Reconcile the stored keys of an account with the chain.

        Args:
            address: Account address

        Returns:
            Applied diff
        """
        address = ensure_prefixed_address(address)
        account = await self.gateway.get_account(address)
        new_keys = [create_key_entity(address, key) for key in account.keys]
        return await self.key_index.update_account_keys(address, new_keys)

    async def shutdown(self, grace_period: float | None = None) -> None:
        """
        Stop all transaction watchers and release their subscriptions.

        Args:
            grace_period: Seconds watchers may keep running to reach the
                sealed state before they are cancelled
        """
        if grace_period:
            await self.watchers.join(timeout=grace_period)
        await self.watchers.shutdown()
        logger.info("[Indexer] Stopped")
