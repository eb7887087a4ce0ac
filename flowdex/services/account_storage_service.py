"""
Account storage service.

Reads the storage of accounts through a Cadence script and keeps the
storage index in sync with it.

Storage changes cannot be derived from events without interpreting
transaction bodies, so the only strategy implemented today re-reads the
storage of every indexed account. StorageReindexStrategy is the seam for
an incremental strategy.
"""

import asyncio
from typing import Any, Protocol

from loguru import logger

from flowdex.repositories.base import ResourceIndex
from flowdex.services.flow_gateway.cadence import encode_argument
from flowdex.services.flow_gateway.client import FlowGatewayService

STORAGE_ITEMS_SCRIPT = """
access(all) struct StorageItem {
    access(all) let domain: String
    access(all) let identifier: String
    access(all) let type: Type

    init(domain: String, identifier: String, type: Type) {
        self.domain = domain
        self.identifier = identifier
        self.type = type
    }
}

access(all) fun main(address: Address): [StorageItem] {
    let account = getAuthAccount<auth(Storage) &Account>(address)
    let items: [StorageItem] = []

    account.storage.forEachStored(fun (path: StoragePath, type: Type): Bool {
        items.append(StorageItem(domain: "storage", identifier: path.toString().slice(from: 9, upTo: path.toString().length), type: type))
        return true
    })
    account.storage.forEachPublic(fun (path: PublicPath, type: Type): Bool {
        items.append(StorageItem(domain: "public", identifier: path.toString().slice(from: 8, upTo: path.toString().length), type: type))
        return true
    })

    return items
}
"""


def build_storage_item_id(address: str, domain: str, identifier: str) -> str:
    """Storage items are keyed by address and full path."""
    return f"{address}/{domain}/{identifier}"


class AccountStorageService:
    """Fetches the current storage items of an account from the chain."""

    def __init__(self, gateway: FlowGatewayService) -> None:
        """
        Initialize storage service.

        Args:
            gateway: Flow gateway client
        """
        self.gateway = gateway

    async def get_account_storage_items(self, address: str) -> list[dict[str, Any]]:
        """
        Get all storage items of an account.

        Args:
            address: Prefixed account address

        Returns:
            Storage item entity dicts
        """
        result = await self.gateway.execute_script(
            STORAGE_ITEMS_SCRIPT, [encode_argument("Address", address)]
        )

        items = []
        for item in result or []:
            domain = item["domain"]
            identifier = item["identifier"]
            items.append(
                {
                    "id": build_storage_item_id(address, domain, identifier),
                    "address": address,
                    "path_domain": domain,
                    "path_identifier": identifier,
                    "data": {"type": item.get("type")},
                }
            )
        return items


class StorageReindexStrategy(Protocol):
    """Keeps the account storage index up to date."""

    async def reindex_all(self) -> None:
        """Bring storage of all indexed accounts up to date."""
        ...


class FullStorageReindexer:
    """
    Re-reads the storage of every indexed account and upserts every item.

    No diffing against previous state; failures are isolated per account.
    """

    def __init__(
        self,
        storage_service: AccountStorageService,
        account_index: ResourceIndex,
        storage_index: ResourceIndex,
    ) -> None:
        """
        Initialize reindexer.

        Args:
            storage_service: Source of storage items
            account_index: Index of accounts to cover
            storage_index: Index receiving storage items
        """
        self.storage_service = storage_service
        self.account_index = account_index
        self.storage_index = storage_index

    async def reindex_all(self) -> None:
        """Re-index the storage of all indexed accounts."""
        accounts = await self.account_index.find_all()
        logger.debug(
            f"[Storage] Processing storages for accounts: "
            f"{', '.join(account.address for account in accounts)}"
        )
        await asyncio.gather(
            *(self._reindex_account_isolated(account.address) for account in accounts)
        )

    async def reindex_account(self, address: str) -> int:
        """
        Re-index the storage of one account.

        Returns:
            Number of upserted items
        """
        items = await self.storage_service.get_account_storage_items(address)
        await asyncio.gather(*(self.storage_index.upsert(**item) for item in items))
        return len(items)

    async def _reindex_account_isolated(self, address: str) -> None:
        try:
            await self.reindex_account(address)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"[Storage] Failed to index storage of {address}: {e}")
