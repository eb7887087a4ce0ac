"""
Block repository.

Data access layer for indexed blocks.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from flowdex.models.block import Block
from flowdex.repositories.base import ResourceIndex


class BlockRepository(ResourceIndex[Block]):
    """Repository for indexed blocks."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        """Initialize repository."""
        super().__init__(Block, session_maker)

    async def get_latest_block(self) -> Block | None:
        """
        Get the block with the highest height.

        Returns:
            Latest indexed block or None if nothing is indexed yet
        """
        stmt = select(Block).order_by(Block.height.desc()).limit(1)
        async with self.session_maker() as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def get_by_height(self, height: int) -> Block | None:
        """
        Get block by height.

        Args:
            height: Block height

        Returns:
            Block or None
        """
        stmt = select(Block).where(Block.height == height)
        async with self.session_maker() as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()
