"""Transaction repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from flowdex.models.transaction import Transaction
from flowdex.repositories.base import ResourceIndex


class TransactionRepository(ResourceIndex[Transaction]):
    """Repository for indexed transactions."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        """Initialize repository."""
        super().__init__(Transaction, session_maker)

    async def find_by_block(self, block_id: str) -> list[Transaction]:
        """Get all transactions included in a block."""
        stmt = select(Transaction).where(Transaction.block_id == block_id)
        async with self.session_maker() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())
