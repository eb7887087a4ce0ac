"""
Gateway record types.

Gateway-shaped records returned by FlowGatewayService. They mirror what
the chain reports and are translated into index entities by the mappers.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class FlowBlock:
    """Block header plus payload."""

    id: str
    parent_id: str
    height: int
    timestamp: str
    collection_guarantees: list[dict[str, Any]] = field(default_factory=list)
    block_seals: list[dict[str, Any]] = field(default_factory=list)
    signatures: list[Any] | None = None


@dataclass
class FlowCollection:
    """Collection of transaction ids guaranteed by a block."""

    id: str
    transaction_ids: list[str] = field(default_factory=list)


@dataclass
class FlowSignature:
    """Envelope or payload signature."""

    address: str
    key_id: int
    signature: str


@dataclass
class FlowProposalKey:
    """Key that proposed a transaction."""

    address: str
    key_id: int
    sequence_number: int


@dataclass
class FlowTransaction:
    """Transaction body; args are type-annotated JSON-Cadence values."""

    id: str
    script: str
    args: list[dict[str, Any]]
    reference_block_id: str
    gas_limit: int
    payer: str
    proposal_key: FlowProposalKey
    authorizers: list[str] = field(default_factory=list)
    payload_signatures: list[FlowSignature] = field(default_factory=list)
    envelope_signatures: list[FlowSignature] = field(default_factory=list)


@dataclass
class FlowEvent:
    """Event emitted by a transaction, with decoded payload."""

    type: str
    transaction_id: str
    transaction_index: int
    event_index: int
    data: dict[str, Any] = field(default_factory=dict)
    block_id: str | None = None


@dataclass
class FlowTransactionStatus:
    """Execution result of a transaction."""

    status: int
    status_code: int
    error_message: str = ""
    block_id: str | None = None
    events: list[FlowEvent] = field(default_factory=list)


@dataclass
class FlowKey:
    """Account key as reported by the chain (algorithms as protocol codes)."""

    index: int
    public_key: str
    sign_algo: int
    hash_algo: int
    weight: int
    sequence_number: int
    revoked: bool = False


@dataclass
class FlowAccount:
    """Account with its keys and deployed contracts."""

    address: str
    balance: int
    code: str | None = None
    keys: list[FlowKey] = field(default_factory=list)
    contracts: dict[str, str] = field(default_factory=dict)
