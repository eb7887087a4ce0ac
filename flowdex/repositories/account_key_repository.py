"""
Account key repository.

Data access layer for account keys, including bulk refresh of an
account's key list through the keyed entity reconciler.
"""

from typing import Any

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from flowdex.models.account_key import AccountKey
from flowdex.repositories.base import ResourceIndex
from flowdex.utils.entity_diff import (
    EntitiesDiff,
    compute_entities_diff,
    process_entities_diff,
)

KEY_PRIMARY_KEY = ("address", "index")
KEY_SENSITIVE_FIELDS = ("private_key",)


class AccountKeyRepository(ResourceIndex[AccountKey]):
    """Repository for account keys."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        """Initialize repository."""
        super().__init__(AccountKey, session_maker)

    async def find_by_address(self, address: str) -> list[AccountKey]:
        """
        Get all keys of an account ordered by key index.

        Args:
            address: Prefixed account address

        Returns:
            List of keys
        """
        stmt = (
            select(AccountKey)
            .where(AccountKey.address == address)
            .order_by(AccountKey.index)
        )
        async with self.session_maker() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def get_by_index(self, address: str, index: int) -> AccountKey | None:
        """Get key by its position in the account's key list."""
        stmt = select(AccountKey).where(
            AccountKey.address == address, AccountKey.index == index
        )
        async with self.session_maker() as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def update_account_keys(
        self, address: str, new_keys: list[dict[str, Any]]
    ) -> EntitiesDiff:
        """
        Reconcile stored keys of an account with a fresh snapshot.

        Keys are matched by (address, index). Revoked keys stay as long as
        the snapshot still lists them; a stored private key is never
        replaced by an empty one and creation timestamps are kept.

        Args:
            address: Prefixed account address
            new_keys: Key entity dicts for the whole account

        Returns:
            Applied diff
        """
        old_keys = await self.find_by_address(address)
        diff = compute_entities_diff(
            old_entities=old_keys,
            new_entities=new_keys,
            primary_key=KEY_PRIMARY_KEY,
            sensitive_fields=KEY_SENSITIVE_FIELDS,
        )

        if diff.is_empty:
            return diff

        await process_entities_diff(
            diff,
            create=lambda key: self.create(**key),
            update=self._apply_key_update,
            delete=lambda key: self.delete(key.id),
        )

        logger.debug(
            f"[Keys] {address}: created={len(diff.create)}, "
            f"updated={len(diff.update)}, deleted={len(diff.delete)}"
        )
        return diff

    async def _apply_key_update(self, key: dict[str, Any]) -> AccountKey:
        # A different public key at the same index changes the id
        existing = await self.get_by_index(key["address"], key["index"])
        if existing is not None and existing.id != key["id"]:
            await self.delete(existing.id)
            # Secrets of the replaced key never carry over to the new one
            key = {**key, **dict.fromkeys(KEY_SENSITIVE_FIELDS)}
        return await self.upsert(**key)
