"""Account, contract and storage repositories."""

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from flowdex.models.account import Account
from flowdex.models.account_contract import AccountContract
from flowdex.models.account_storage_item import AccountStorageItem
from flowdex.repositories.base import ResourceIndex


class AccountRepository(ResourceIndex[Account]):
    """Repository for indexed accounts."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        """Initialize repository."""
        super().__init__(Account, session_maker)


class AccountContractRepository(ResourceIndex[AccountContract]):
    """Repository for contracts deployed on accounts."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        """Initialize repository."""
        super().__init__(AccountContract, session_maker)

    async def find_by_address(self, address: str) -> list[AccountContract]:
        """Get all contracts deployed on an account."""
        return await self.find_all(address=address)


class AccountStorageRepository(ResourceIndex[AccountStorageItem]):
    """Repository for account storage items."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        """Initialize repository."""
        super().__init__(AccountStorageItem, session_maker)

    async def find_by_address(self, address: str) -> list[AccountStorageItem]:
        """Get all storage items of an account."""
        return await self.find_all(address=address)

    async def delete_by_address(self, address: str) -> int:
        """
        Remove all storage items of an account.

        Returns:
            Number of removed rows
        """
        stmt = delete(AccountStorageItem).where(
            AccountStorageItem.address == address
        )
        async with self.session_maker() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount
