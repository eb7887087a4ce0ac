"""
Account storage item model.

Fully re-derived on every storage reindex pass.
"""

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from flowdex.models.base import Base, IndexEntityMixin


class AccountStorageItem(IndexEntityMixin, Base):
    """Value stored under a path of an account; id is "{address}/{domain}/{identifier}"."""

    __tablename__ = "account_storage_items"

    address: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    path_domain: Mapped[str] = mapped_column(String(16), nullable=False)
    path_identifier: Mapped[str] = mapped_column(String(255), nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
