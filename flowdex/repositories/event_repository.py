"""Event repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from flowdex.models.event import Event
from flowdex.repositories.base import ResourceIndex


class EventRepository(ResourceIndex[Event]):
    """Repository for indexed events."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        """Initialize repository."""
        super().__init__(Event, session_maker)

    async def find_by_transaction(self, transaction_id: str) -> list[Event]:
        """Get events emitted by a transaction, in emission order."""
        stmt = (
            select(Event)
            .where(Event.transaction_id == transaction_id)
            .order_by(Event.event_index)
        )
        async with self.session_maker() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())
