"""
Transaction model.

Immutable except for the status field group, which is patched while the
transaction moves towards the sealed state.
"""

from typing import Any

from sqlalchemy import JSON, BigInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from flowdex.models.base import Base, IndexEntityMixin


class Transaction(IndexEntityMixin, Base):
    """Indexed Flow transaction."""

    __tablename__ = "transactions"

    script: Mapped[str] = mapped_column(Text, nullable=False, default="")
    payer: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    block_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    reference_block_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True
    )
    gas_limit: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    authorizers: Mapped[list[str]] = mapped_column(
        JSON, nullable=False, default=list
    )
    # [{"identifier": ..., "type": ..., "value": ...}]
    arguments: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    # {"address": ..., "key_index": ..., "sequence_number": ...}
    proposal_key: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    envelope_signatures: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    payload_signatures: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )

    # {"error_message": ..., "grpc_status": ..., "execution_status": ...}
    status: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Transaction(id={self.id[:16]}..., payer={self.payer})>"
