"""Account contract model."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from flowdex.models.base import Base, IndexEntityMixin


class AccountContract(IndexEntityMixin, Base):
    """Contract deployed on an account; id is "{address}.{name}"."""

    __tablename__ = "account_contracts"

    address: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(Text, nullable=False, default="")
