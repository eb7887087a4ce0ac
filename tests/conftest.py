"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for tests; no external services are contacted
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("FLOW_GATEWAY_URL", "http://127.0.0.1:8888")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("TX_STATUS_POLL_INTERVAL", "0.01")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from types import SimpleNamespace  # noqa: E402
from typing import Any  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from flowdex.config.constants import TX_STATUS_SEALED  # noqa: E402
from flowdex.services.flow_gateway.types import (  # noqa: E402
    FlowAccount,
    FlowBlock,
    FlowCollection,
    FlowEvent,
    FlowKey,
    FlowProposalKey,
    FlowTransaction,
    FlowTransactionStatus,
)
from flowdex.services.flow_indexer import FlowIndexerService  # noqa: E402
from flowdex.services.interactions import CadenceScriptParser  # noqa: E402
from flowdex.utils.exceptions import AccountNotFoundError  # noqa: E402


# ----------------------------------------------------------------------
# In-memory resource indexes
# ----------------------------------------------------------------------


class InMemoryIndex:
    """Resource index keeping records as namespaces in a dict."""

    def __init__(self) -> None:
        self.items: dict[str, SimpleNamespace] = {}
        self.failing_ids: set[str] = set()
        self.calls: list[tuple[str, str]] = []

    def _check(self, operation: str, id: str) -> None:
        self.calls.append((operation, id))
        if id in self.failing_ids:
            raise RuntimeError(f"{operation} failed for {id}")

    async def find_all(self, **filters: Any) -> list[SimpleNamespace]:
        return [
            item
            for item in self.items.values()
            if all(getattr(item, k, None) == v for k, v in filters.items())
        ]

    async def find_one_by_id(self, id: str) -> SimpleNamespace | None:
        return self.items.get(id)

    async def create(self, **data: Any) -> SimpleNamespace:
        self._check("create", data["id"])
        if data["id"] in self.items:
            raise ValueError(f"Duplicate id {data['id']}")
        self.items[data["id"]] = SimpleNamespace(**data)
        return self.items[data["id"]]

    async def update(self, id: str, **data: Any) -> SimpleNamespace | None:
        self._check("update", id)
        item = self.items.get(id)
        if item is None:
            return None
        for key, value in data.items():
            setattr(item, key, value)
        return item

    async def upsert(self, **data: Any) -> SimpleNamespace:
        self._check("upsert", data["id"])
        self.items[data["id"]] = SimpleNamespace(**data)
        return self.items[data["id"]]

    async def delete(self, id: str) -> bool:
        self._check("delete", id)
        return self.items.pop(id, None) is not None


class InMemoryBlockIndex(InMemoryIndex):
    """Block index answering latest block queries."""

    def __init__(self) -> None:
        super().__init__()
        self.failing_heights: set[int] = set()

    async def upsert(self, **data: Any) -> SimpleNamespace:
        if data["height"] in self.failing_heights:
            raise RuntimeError(f"Block #{data['height']} rejected")
        return await super().upsert(**data)

    async def get_latest_block(self) -> SimpleNamespace | None:
        if not self.items:
            return None
        return max(self.items.values(), key=lambda block: block.height)


# ----------------------------------------------------------------------
# Scripted gateway
# ----------------------------------------------------------------------


class FakeSubscription:
    """Subscription replaying a fixed list of statuses."""

    def __init__(self, gateway: "FakeFlowGateway", transaction_id: str) -> None:
        self.gateway = gateway
        self.transaction_id = transaction_id
        self.callbacks: list = []

    def on_update(self, callback):
        self.callbacks.append(callback)

        def unsubscribe() -> None:
            self.gateway.unsubscribed.append(self.transaction_id)

        return unsubscribe

    async def once_sealed(self) -> FlowTransactionStatus:
        updates = self.gateway.status_updates.get(self.transaction_id)
        if isinstance(updates, Exception):
            raise updates
        for status in updates or []:
            for callback in self.callbacks:
                await callback(status)
        if self.transaction_id in self.gateway.hanging_subscriptions:
            await self.gateway.hang.wait()
        return updates[-1] if updates else None


class FakeFlowGateway:
    """Gateway answering from in-memory chain state."""

    def __init__(self) -> None:
        self.reachable = True
        self.blocks: dict[int, FlowBlock] = {}
        self.collections: dict[str, FlowCollection] = {}
        self.transactions: dict[str, FlowTransaction] = {}
        self.statuses: dict[str, FlowTransactionStatus] = {}
        self.accounts: dict[str, FlowAccount] = {}
        self.status_updates: dict[str, Any] = {}
        self.failing_blocks: set[int] = set()
        self.account_errors: dict[str, Exception] = {}
        self.account_lookups: list[str] = []
        self.unsubscribed: list[str] = []
        self.scripts: list[str] = []
        self.hanging_subscriptions: set[str] = set()
        self.hang = None
        self.close = AsyncMock()

    # chain state builders

    def add_account(
        self,
        address: str,
        balance: int = 0,
        keys: list[FlowKey] | None = None,
        contracts: dict[str, str] | None = None,
    ) -> FlowAccount:
        account = FlowAccount(
            address=address,
            balance=balance,
            keys=keys or [],
            contracts=contracts or {},
        )
        self.accounts[address] = account
        return account

    def add_block(
        self,
        height: int,
        transactions: list[tuple[FlowTransaction, FlowTransactionStatus]] = (),
    ) -> FlowBlock:
        collection_id = f"collection-{height}"
        block = FlowBlock(
            id=f"block-{height}",
            parent_id=f"block-{height - 1}",
            height=height,
            timestamp="2026-10-17T10:00:00.123456789Z",
            collection_guarantees=(
                [{"collection_id": collection_id, "signer_ids": []}]
                if transactions
                else []
            ),
            block_seals=[],
        )
        self.blocks[height] = block
        if transactions:
            self.collections[collection_id] = FlowCollection(
                id=collection_id,
                transaction_ids=[transaction.id for transaction, _ in transactions],
            )
        for transaction, status in transactions:
            self.transactions[transaction.id] = transaction
            self.statuses[transaction.id] = status
        return block

    # gateway interface

    async def is_reachable(self) -> bool:
        return self.reachable

    async def get_latest_block(self) -> FlowBlock:
        return self.blocks[max(self.blocks)]

    async def get_block_by_height(self, height: int) -> FlowBlock:
        if height in self.failing_blocks:
            raise RuntimeError(f"Block #{height} unavailable")
        return self.blocks[height]

    async def get_collection_by_id(self, collection_id: str) -> FlowCollection:
        return self.collections[collection_id]

    async def get_transaction_by_id(self, transaction_id: str) -> FlowTransaction:
        return self.transactions[transaction_id]

    async def get_transaction_status_by_id(
        self, transaction_id: str
    ) -> FlowTransactionStatus:
        return self.statuses[transaction_id]

    async def get_account(self, address: str) -> FlowAccount:
        self.account_lookups.append(address)
        if address in self.account_errors:
            raise self.account_errors[address]
        if address not in self.accounts:
            raise AccountNotFoundError(address)
        return self.accounts[address]

    async def execute_script(self, source: str, arguments: list[str] | None = None):
        self.scripts.append(source)
        return []

    def subscribe_to_transaction_status(self, transaction_id: str) -> FakeSubscription:
        return FakeSubscription(self, transaction_id)


# ----------------------------------------------------------------------
# Record builders
# ----------------------------------------------------------------------


def make_transaction(
    transaction_id: str,
    script: str = "transaction { execute {} }",
    args: list[dict[str, Any]] | None = None,
    payer: str = "f8d6e0586b0a20c7",
) -> FlowTransaction:
    """Build a gateway transaction."""
    return FlowTransaction(
        id=transaction_id,
        script=script,
        args=args or [],
        reference_block_id="reference-block",
        gas_limit=9999,
        payer=payer,
        proposal_key=FlowProposalKey(address=payer, key_id=0, sequence_number=1),
        authorizers=[payer],
    )


def make_status(
    events: list[FlowEvent] | None = None,
    status: int = TX_STATUS_SEALED,
    status_code: int = 0,
    error_message: str = "",
) -> FlowTransactionStatus:
    """Build a gateway transaction status."""
    return FlowTransactionStatus(
        status=status,
        status_code=status_code,
        error_message=error_message,
        events=events or [],
    )


def make_event(
    event_type: str,
    data: dict[str, Any],
    event_index: int = 0,
) -> FlowEvent:
    """Build a gateway event (transaction id is stamped by the fetcher)."""
    return FlowEvent(
        type=event_type,
        transaction_id="",
        transaction_index=0,
        event_index=event_index,
        data=data,
    )


def make_key(
    public_key: str = "deadbeef",
    index: int = 0,
    sign_algo: int = 2,
    hash_algo: int = 3,
) -> FlowKey:
    """Build a gateway account key."""
    return FlowKey(
        index=index,
        public_key=public_key,
        sign_algo=sign_algo,
        hash_algo=hash_algo,
        weight=1000,
        sequence_number=0,
    )


# ----------------------------------------------------------------------
# Fixtures
# ----------------------------------------------------------------------


@pytest.fixture
def gateway():
    """Scripted gateway with an empty chain."""
    return FakeFlowGateway()


@pytest.fixture
def indexes():
    """In-memory resource indexes by entity name."""
    return SimpleNamespace(
        blocks=InMemoryBlockIndex(),
        transactions=InMemoryIndex(),
        events=InMemoryIndex(),
        accounts=InMemoryIndex(),
        keys=InMemoryIndex(),
        contracts=InMemoryIndex(),
    )


@pytest.fixture
def storage_reindexer():
    """Storage reindex strategy mock."""
    reindexer = AsyncMock()
    reindexer.reindex_all = AsyncMock()
    return reindexer


@pytest_asyncio.fixture
async def indexer(gateway, indexes, storage_reindexer):
    """Indexer wired to the fake gateway and in-memory indexes."""
    service = FlowIndexerService(
        gateway=gateway,
        script_parser=CadenceScriptParser(),
        block_index=indexes.blocks,
        transaction_index=indexes.transactions,
        event_index=indexes.events,
        account_index=indexes.accounts,
        key_index=indexes.keys,
        contract_index=indexes.contracts,
        storage_reindexer=storage_reindexer,
    )
    # Bootstrap is covered separately
    service.well_known_addresses = ()
    yield service
    await service.shutdown()
