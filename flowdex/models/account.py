"""
Account model.

Keyed by the prefixed address; balance is recomputed on token movements.
"""

from typing import Any

from sqlalchemy import JSON, BigInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from flowdex.models.base import Base, IndexEntityMixin


class Account(IndexEntityMixin, Base):
    """Indexed Flow account."""

    __tablename__ = "accounts"

    address: Mapped[str] = mapped_column(
        String(20), nullable=False, unique=True, index=True
    )
    # Smallest unit (1 FLOW = 10^8)
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    # [{"name": ..., "description": ...}]
    tags: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    code: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        """String representation."""
        return f"<Account(address={self.address}, balance={self.balance})>"
