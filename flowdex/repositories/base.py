"""
Base repository.

Generic resource index operations for all index entities.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from flowdex.models.base import Base

# Generic type for model
ModelType = TypeVar("ModelType", bound=Base)


class ResourceIndex(Generic[ModelType]):
    """
    Base repository with generic resource index operations.

    Every operation runs in its own session and commits before returning,
    so many operations can be in flight concurrently and each one is
    atomic on its own.

    Type Parameters:
        ModelType: SQLAlchemy model class

    Example:
        class BlockRepository(ResourceIndex[Block]):
            def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
                super().__init__(Block, session_maker)
    """

    def __init__(
        self,
        model: type[ModelType],
        session_maker: async_sessionmaker[AsyncSession],
    ) -> None:
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session_maker: Async session factory
        """
        self.model = model
        self.session_maker = session_maker

    async def find_all(self, **filters: Any) -> list[ModelType]:
        """
        Find all entities matching filters.

        Args:
            **filters: Column filters

        Returns:
            List of matching entities
        """
        stmt = select(self.model).filter_by(**filters)
        async with self.session_maker() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def find_one_by_id(self, id: str) -> ModelType | None:
        """
        Get entity by ID.

        Args:
            id: Entity ID

        Returns:
            Entity or None if not found
        """
        async with self.session_maker() as session:
            return await session.get(self.model, id)

    async def create(self, **data: Any) -> ModelType:
        """
        Create new entity.

        Args:
            **data: Entity data (must include id)

        Returns:
            Created entity

        Raises:
            IntegrityError: If an entity with the same id already exists
        """
        entity = self.model(**data)
        async with self.session_maker() as session:
            session.add(entity)
            await session.commit()
            return entity

    async def update(self, id: str, **data: Any) -> ModelType | None:
        """
        Patch given fields of an entity, leaving all others untouched.

        Args:
            id: Entity ID
            **data: Fields to change

        Returns:
            Updated entity or None if not found
        """
        async with self.session_maker() as session:
            entity = await session.get(self.model, id)
            if entity is None:
                return None

            for key, value in data.items():
                setattr(entity, key, value)

            await session.commit()
            return entity

    async def upsert(self, **data: Any) -> ModelType:
        """
        Create or fully replace entity by ID.

        Two concurrent first writes of the same id race on insert;
        the loser retries as an update, so the last write wins.

        Args:
            **data: Entity data (must include id)

        Returns:
            Stored entity
        """
        try:
            return await self._merge(data)
        except IntegrityError:
            return await self._merge(data)

    async def _merge(self, data: dict[str, Any]) -> ModelType:
        async with self.session_maker() as session:
            entity = await session.merge(self.model(**data))
            await session.commit()
            return entity

    async def delete(self, id: str) -> bool:
        """
        Delete entity by ID.

        Args:
            id: Entity ID

        Returns:
            True if deleted, False if not found
        """
        stmt = delete(self.model).where(self.model.id == id)
        async with self.session_maker() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount > 0
