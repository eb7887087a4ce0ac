"""
Flow Indexer Entity Mappers.

Pure functions translating gateway records into index entity dicts
(address normalization, algorithm code lookup, id construction).
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import asdict
from datetime import datetime
from typing import Any

from flowdex.config.constants import (
    ADDRESS_PREFIX,
    DEFAULT_ACCOUNT_TAG,
    GRPC_STATUS_FAILURE,
    GRPC_STATUS_SUCCESS,
    HASH_ALGORITHMS,
    SERVICE_ACCOUNT_ADDRESSES,
    SERVICE_ACCOUNT_TAG,
    SIGNATURE_ALGORITHMS,
    WELL_KNOWN_ADDRESSES,
)
from flowdex.services.flow_gateway.types import (
    FlowAccount,
    FlowBlock,
    FlowEvent,
    FlowKey,
    FlowSignature,
    FlowTransaction,
    FlowTransactionStatus,
)
from flowdex.services.interactions import ParsedInteraction

# Argument value types decoded recursively; everything else passes through
ARGUMENT_DICTIONARY = "Dictionary"
ARGUMENT_ARRAY = "Array"

_FRACTION = re.compile(r"\.\d+")


def ensure_prefixed_address(address: str | None) -> str | None:
    """Add the 0x prefix to an address that lacks it."""
    if address is None:
        return None
    return address if address.startswith(ADDRESS_PREFIX) else f"{ADDRESS_PREFIX}{address}"


def decode_public_key(encoded_key: Iterable[int | str]) -> str:
    """
    Decode a public key given as a list of byte values.

    Args:
        encoded_key: Byte values (ints or numeric strings)

    Returns:
        Lowercase hex string
    """
    return bytes(int(value) for value in encoded_key).hex()


def build_key_id(address: str, public_key: str) -> str:
    """Account keys are keyed by address and public key."""
    return f"{ensure_prefixed_address(address)}.{public_key}"


def build_contract_id(address: str, name: str) -> str:
    """Contracts are keyed by address and contract name."""
    return f"{ensure_prefixed_address(address)}.{name}"


def build_event_id(transaction_id: str, event_index: int) -> str:
    """Events are keyed by owning transaction and position."""
    return f"{transaction_id}.{event_index}"


def remap_grpc_status(status_code: int) -> int:
    """
    Normalize grpc status codes to success (0) / failure (1).

    Older emulator versions report other codes for failed transactions.
    """
    if status_code in (GRPC_STATUS_SUCCESS, GRPC_STATUS_FAILURE):
        return status_code
    return GRPC_STATUS_FAILURE


def from_type_annotated_argument(annotated: Any) -> Any:
    """
    Strip JSON-Cadence type annotations from an argument value.

    Dictionaries become lists of {"key", "value"} pairs and arrays lists of
    elements, both decoded recursively. Paths and scalars pass through.
    """
    if not isinstance(annotated, dict):
        return annotated

    type_name = annotated.get("type")
    value = annotated.get("value")

    if type_name == ARGUMENT_DICTIONARY:
        return [
            {
                "key": from_type_annotated_argument(entry["key"]),
                "value": from_type_annotated_argument(entry["value"]),
            }
            for entry in value or []
        ]
    if type_name == ARGUMENT_ARRAY:
        return [from_type_annotated_argument(element) for element in value or []]
    return value


def get_account_tags(address: str) -> list[dict[str, str]]:
    """Derive labels for an account address."""
    tags = []
    if address in WELL_KNOWN_ADDRESSES:
        tags.append(dict(DEFAULT_ACCOUNT_TAG))
    if address in SERVICE_ACCOUNT_ADDRESSES:
        tags.append(dict(SERVICE_ACCOUNT_TAG))
    return tags


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    # Gateways report nanoseconds; datetime keeps microseconds
    text = _FRACTION.sub(lambda m: m.group(0)[:7], value.replace("Z", "+00:00"))
    return datetime.fromisoformat(text)


def create_block_entity(block: FlowBlock) -> dict[str, Any]:
    """Build a Block entity."""
    return {
        "id": block.id,
        "height": block.height,
        "parent_id": block.parent_id,
        "timestamp": _parse_timestamp(block.timestamp),
        "collection_guarantees": block.collection_guarantees,
        "block_seals": block.block_seals,
        # Not every gateway version returns block signatures
        "signatures": block.signatures or [],
    }


def create_status_entity(status: FlowTransactionStatus) -> dict[str, Any]:
    """Build the status field group of a Transaction entity."""
    return {
        "error_message": status.error_message,
        "grpc_status": remap_grpc_status(status.status_code),
        "execution_status": status.status,
    }


def _serialize_signatures(signatures: Sequence[FlowSignature]) -> list[dict[str, Any]]:
    return [
        {**asdict(signature), "address": ensure_prefixed_address(signature.address)}
        for signature in signatures
    ]


def create_transaction_entity(
    block: FlowBlock,
    transaction: FlowTransaction,
    status: FlowTransactionStatus,
    parsed_interaction: ParsedInteraction | None,
) -> dict[str, Any]:
    """
    Build a Transaction entity.

    Arguments are labelled positionally with the parsed interaction
    parameters; without parameters no arguments are stored.
    """
    parameters = parsed_interaction.parameters if parsed_interaction else []
    arguments = [
        {
            "identifier": parameter.identifier,
            "type": parameter.type,
            "value": (
                from_type_annotated_argument(transaction.args[index])
                if index < len(transaction.args)
                else None
            ),
        }
        for index, parameter in enumerate(parameters)
    ]

    return {
        "id": transaction.id,
        "script": transaction.script,
        "payer": ensure_prefixed_address(transaction.payer),
        "block_id": block.id,
        "reference_block_id": transaction.reference_block_id,
        "gas_limit": transaction.gas_limit,
        "authorizers": [
            ensure_prefixed_address(address) for address in transaction.authorizers
        ],
        "arguments": arguments,
        "proposal_key": {
            **asdict(transaction.proposal_key),
            "address": ensure_prefixed_address(transaction.proposal_key.address),
        },
        "envelope_signatures": _serialize_signatures(transaction.envelope_signatures),
        "payload_signatures": _serialize_signatures(transaction.payload_signatures),
        "status": create_status_entity(status),
    }


def create_event_entity(event: FlowEvent) -> dict[str, Any]:
    """Build an Event entity."""
    return {
        "id": build_event_id(event.transaction_id, event.event_index),
        "type": event.type,
        "transaction_id": event.transaction_id,
        "block_id": event.block_id,
        "transaction_index": event.transaction_index,
        "event_index": event.event_index,
        "data": event.data,
    }


def create_account_entity(account: FlowAccount) -> dict[str, Any]:
    """Build an Account entity."""
    address = ensure_prefixed_address(account.address)
    return {
        "id": address,
        "address": address,
        "balance": account.balance,
        "tags": get_account_tags(address),
        "code": account.code,
    }


def create_key_entity(address: str, key: FlowKey) -> dict[str, Any]:
    """Build an AccountKey entity."""
    address = ensure_prefixed_address(address)
    return {
        "id": build_key_id(address, key.public_key),
        "index": key.index,
        "address": address,
        "public_key": key.public_key,
        "sign_algo": SIGNATURE_ALGORITHMS.get(key.sign_algo),
        "hash_algo": HASH_ALGORITHMS.get(key.hash_algo),
        "weight": key.weight,
        "sequence_number": key.sequence_number,
        "revoked": key.revoked,
    }


def create_contract_entity(account: FlowAccount, name: str) -> dict[str, Any]:
    """
    Build an AccountContract entity.

    Raises:
        KeyError: If the account has no contract with that name
    """
    address = ensure_prefixed_address(account.address)
    return {
        "id": build_contract_id(address, name),
        "address": address,
        "name": name,
        "code": account.contracts[name],
    }
