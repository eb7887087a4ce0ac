"""
Event model.

Append-only; id is "{transaction_id}.{event_index}".
"""

from typing import Any

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from flowdex.models.base import Base, IndexEntityMixin


class Event(IndexEntityMixin, Base):
    """Indexed Flow event."""

    __tablename__ = "events"

    type: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    transaction_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    block_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    transaction_index: Mapped[int] = mapped_column(Integer, nullable=False)
    event_index: Mapped[int] = mapped_column(Integer, nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
