"""
Account key model.

Id is "{address}.{public_key}"; index is unique within one address.
"""

from sqlalchemy import Boolean, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from flowdex.models.base import Base, IndexEntityMixin


class AccountKey(IndexEntityMixin, Base):
    """Public key attached to an account."""

    __tablename__ = "account_keys"
    __table_args__ = (
        UniqueConstraint("address", "index", name="uq_account_keys_address_index"),
    )

    index: Mapped[int] = mapped_column(Integer, nullable=False)
    address: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    public_key: Mapped[str] = mapped_column(Text, nullable=False)
    sign_algo: Mapped[str | None] = mapped_column(String(32), nullable=True)
    hash_algo: Mapped[str | None] = mapped_column(String(32), nullable=True)
    weight: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sequence_number: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Only known for keys managed locally; never sent by the chain.
    private_key: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        """String representation."""
        return f"<AccountKey(address={self.address}, index={self.index})>"
