"""
Block model.

One row per sealed block; height is globally unique.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, BigInteger, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from flowdex.models.base import Base, IndexEntityMixin


class Block(IndexEntityMixin, Base):
    """Indexed Flow block."""

    __tablename__ = "blocks"

    height: Mapped[int] = mapped_column(
        BigInteger, nullable=False, unique=True, index=True
    )
    parent_id: Mapped[str] = mapped_column(String(64), nullable=False)
    timestamp: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Opaque lists as returned by the gateway
    collection_guarantees: Mapped[list[Any]] = mapped_column(
        JSON, nullable=False, default=list
    )
    block_seals: Mapped[list[Any]] = mapped_column(
        JSON, nullable=False, default=list
    )
    signatures: Mapped[list[Any]] = mapped_column(
        JSON, nullable=False, default=list
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Block(height={self.height}, id={self.id[:16]}...)>"
