"""
Flow Indexer Service Package.

Keeps the local index in sync with the chain.
"""

from .block_fetching_mixin import BlockData, TransactionData
from .core import FlowIndexerService, UnprocessedBlocksInfo
from .events import ClassifiedEvent, EventKind, classify_event
from .watchers import TransactionWatcherRegistry

__all__ = [
    "BlockData",
    "ClassifiedEvent",
    "EventKind",
    "FlowIndexerService",
    "TransactionData",
    "TransactionWatcherRegistry",
    "UnprocessedBlocksInfo",
    "classify_event",
]
