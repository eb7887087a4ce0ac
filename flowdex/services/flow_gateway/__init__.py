"""
Flow Gateway.

Access API client, gateway record types and status subscriptions.
"""

from .client import FlowGatewayService
from .subscription import TransactionStatusSubscription
from .types import (
    FlowAccount,
    FlowBlock,
    FlowCollection,
    FlowEvent,
    FlowKey,
    FlowProposalKey,
    FlowSignature,
    FlowTransaction,
    FlowTransactionStatus,
)

__all__ = [
    "FlowGatewayService",
    "TransactionStatusSubscription",
    "FlowAccount",
    "FlowBlock",
    "FlowCollection",
    "FlowEvent",
    "FlowKey",
    "FlowProposalKey",
    "FlowSignature",
    "FlowTransaction",
    "FlowTransactionStatus",
]
