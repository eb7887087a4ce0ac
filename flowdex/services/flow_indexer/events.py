"""
Flow Indexer Event Classification.

Maps chain event type strings onto a closed set of event kinds, each with
its own payload shape. Unrecognized events keep their payload as an opaque
map and are not dispatched.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from flowdex.config.constants import (
    EVENT_ACCOUNT_CONTRACT_ADDED,
    EVENT_ACCOUNT_CONTRACT_REMOVED,
    EVENT_ACCOUNT_CONTRACT_UPDATED,
    EVENT_ACCOUNT_CREATED,
    EVENT_ACCOUNT_KEY_ADDED,
    EVENT_ACCOUNT_KEY_REMOVED,
    NULL_ADDRESS_SENTINELS,
    TOKENS_DEPOSITED_PATTERN,
    TOKENS_WITHDRAWN_PATTERN,
)
from flowdex.services.flow_gateway.types import FlowEvent

from .mappers import decode_public_key, ensure_prefixed_address


class EventKind(str, Enum):
    """Event kinds the dispatcher applies to the index."""

    ACCOUNT_CREATED = "account_created"
    ACCOUNT_KEY_ADDED = "account_key_added"
    ACCOUNT_KEY_REMOVED = "account_key_removed"
    ACCOUNT_CONTRACT_ADDED = "account_contract_added"
    ACCOUNT_CONTRACT_UPDATED = "account_contract_updated"
    ACCOUNT_CONTRACT_REMOVED = "account_contract_removed"
    TOKENS_WITHDRAWN = "tokens_withdrawn"
    TOKENS_DEPOSITED = "tokens_deposited"
    UNKNOWN = "unknown"


@dataclass
class AccountPayload:
    """Payload of account created events."""

    address: str


@dataclass
class AccountKeyPayload:
    """Payload of key added/removed events."""

    address: str
    public_key: str


@dataclass
class AccountContractPayload:
    """Payload of contract added/updated/removed events."""

    address: str
    contract_name: str


@dataclass
class TokenMovementPayload:
    """Payload of FlowToken withdraw/deposit events."""

    amount: str | None
    # None when the event carries a null address sentinel
    address: str | None


@dataclass
class OpaquePayload:
    """Payload of events without a known schema."""

    data: dict[str, Any] = field(default_factory=dict)


EventPayload = (
    AccountPayload
    | AccountKeyPayload
    | AccountContractPayload
    | TokenMovementPayload
    | OpaquePayload
)


@dataclass
class ClassifiedEvent:
    """Event kind together with its typed payload."""

    kind: EventKind
    payload: EventPayload
    event: FlowEvent


_EXACT_EVENT_KINDS = {
    EVENT_ACCOUNT_CREATED: EventKind.ACCOUNT_CREATED,
    EVENT_ACCOUNT_KEY_ADDED: EventKind.ACCOUNT_KEY_ADDED,
    EVENT_ACCOUNT_KEY_REMOVED: EventKind.ACCOUNT_KEY_REMOVED,
    EVENT_ACCOUNT_CONTRACT_ADDED: EventKind.ACCOUNT_CONTRACT_ADDED,
    EVENT_ACCOUNT_CONTRACT_UPDATED: EventKind.ACCOUNT_CONTRACT_UPDATED,
    EVENT_ACCOUNT_CONTRACT_REMOVED: EventKind.ACCOUNT_CONTRACT_REMOVED,
}


def event_kind_of(event_type: str) -> EventKind:
    """Resolve the kind of an event type string."""
    kind = _EXACT_EVENT_KINDS.get(event_type)
    if kind is not None:
        return kind
    if TOKENS_WITHDRAWN_PATTERN.fullmatch(event_type):
        return EventKind.TOKENS_WITHDRAWN
    if TOKENS_DEPOSITED_PATTERN.fullmatch(event_type):
        return EventKind.TOKENS_DEPOSITED
    return EventKind.UNKNOWN


def normalize_token_address(value: Any) -> str | None:
    """Return prefixed address, or None for null address sentinels."""
    if value is None or value in NULL_ADDRESS_SENTINELS:
        return None
    address = ensure_prefixed_address(str(value))
    return None if address in NULL_ADDRESS_SENTINELS else address


def _public_key(data: dict[str, Any]) -> str:
    raw = data["publicKey"]
    # Newer event versions wrap the key in a PublicKey struct
    if isinstance(raw, dict):
        raw = raw["publicKey"]
    if isinstance(raw, str):
        return raw.lower().removeprefix("0x")
    return decode_public_key(raw)


def classify_event(event: FlowEvent) -> ClassifiedEvent:
    """
    Classify an event and extract its typed payload.

    Raises:
        KeyError: If a known event lacks a required payload field
    """
    kind = event_kind_of(event.type)
    data = event.data or {}

    match kind:
        case EventKind.ACCOUNT_CREATED:
            payload = AccountPayload(address=ensure_prefixed_address(data["address"]))
        case EventKind.ACCOUNT_KEY_ADDED | EventKind.ACCOUNT_KEY_REMOVED:
            payload = AccountKeyPayload(
                address=ensure_prefixed_address(data["address"]),
                public_key=_public_key(data),
            )
        case (
            EventKind.ACCOUNT_CONTRACT_ADDED
            | EventKind.ACCOUNT_CONTRACT_UPDATED
            | EventKind.ACCOUNT_CONTRACT_REMOVED
        ):
            payload = AccountContractPayload(
                address=ensure_prefixed_address(data["address"]),
                contract_name=data["contract"],
            )
        case EventKind.TOKENS_WITHDRAWN:
            payload = TokenMovementPayload(
                amount=data.get("amount"),
                address=normalize_token_address(data.get("from")),
            )
        case EventKind.TOKENS_DEPOSITED:
            payload = TokenMovementPayload(
                amount=data.get("amount"),
                address=normalize_token_address(data.get("to")),
            )
        case _:
            payload = OpaquePayload(data=dict(data))

    return ClassifiedEvent(kind=kind, payload=payload, event=event)
