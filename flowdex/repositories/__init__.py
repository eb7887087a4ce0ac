"""Resource index repositories."""

from flowdex.repositories.account_key_repository import AccountKeyRepository
from flowdex.repositories.account_repository import (
    AccountContractRepository,
    AccountRepository,
    AccountStorageRepository,
)
from flowdex.repositories.base import ResourceIndex
from flowdex.repositories.block_repository import BlockRepository
from flowdex.repositories.event_repository import EventRepository
from flowdex.repositories.transaction_repository import TransactionRepository

__all__ = [
    "ResourceIndex",
    "AccountRepository",
    "AccountContractRepository",
    "AccountKeyRepository",
    "AccountStorageRepository",
    "BlockRepository",
    "EventRepository",
    "TransactionRepository",
]
