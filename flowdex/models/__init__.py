"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from flowdex.models.base import Base

# Chain data
from flowdex.models.block import Block
from flowdex.models.event import Event
from flowdex.models.transaction import Transaction

# Accounts
from flowdex.models.account import Account
from flowdex.models.account_contract import AccountContract
from flowdex.models.account_key import AccountKey
from flowdex.models.account_storage_item import AccountStorageItem

__all__ = [
    "Base",
    "Block",
    "Event",
    "Transaction",
    "Account",
    "AccountContract",
    "AccountKey",
    "AccountStorageItem",
]
