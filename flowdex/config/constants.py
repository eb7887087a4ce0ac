"""
Application constants.

Centralized Flow protocol constants used by the indexer.
"""

import re

# ========================================================================
# TIMING CONSTANTS
# ========================================================================

FLOW_GATEWAY_TIMEOUT = 30.0  # HTTP timeout for Access API requests (seconds)
INDEXER_POLL_INTERVAL = 1.0  # Delay between indexer ticks (seconds)
TX_STATUS_POLL_INTERVAL = 0.5  # Delay between transaction status polls (seconds)
WATCHER_GRACE_PERIOD = 2.0  # Time given to watchers to reach sealed on shutdown
WATCHER_SHUTDOWN_TIMEOUT = 10.0  # Max wait for watchers to unsubscribe on shutdown

# ========================================================================
# ADDRESSES
# ========================================================================

ADDRESS_PREFIX = "0x"

# Sources of genesis funding carry no real sender address.
NULL_ADDRESS_SENTINELS = frozenset({"", "0x", "0xNULL", "0x0000000000000000"})

# Well known addresses deploy the core contracts. Each role exists in two
# variants: monotonic ("simple") address generation and the default one.
SERVICE_ACCOUNT_ADDRESSES = ("0x0000000000000001", "0xf8d6e0586b0a20c7")
FUNGIBLE_TOKEN_ADDRESSES = ("0x0000000000000002", "0xee82856bf20e2aa6")
FLOW_TOKEN_ADDRESSES = ("0x0000000000000003", "0x0ae53cb6e3f42a79")
FLOW_FEES_ADDRESSES = ("0x0000000000000004", "0xe5a8b7f23e8b548f")

WELL_KNOWN_ADDRESSES = (
    *SERVICE_ACCOUNT_ADDRESSES,
    *FUNGIBLE_TOKEN_ADDRESSES,
    *FLOW_TOKEN_ADDRESSES,
    *FLOW_FEES_ADDRESSES,
)

DEFAULT_ACCOUNT_TAG = {
    "name": "Default",
    "description": "This account was created automatically by the emulator.",
}
SERVICE_ACCOUNT_TAG = {
    "name": "Service",
    "description": (
        "A special account in Flow that has special permissions to manage "
        "system contracts. It is able to mint tokens, set fees, and update "
        "network-level contracts."
    ),
}

# ========================================================================
# EVENTS
# ========================================================================

EVENT_ACCOUNT_CREATED = "flow.AccountCreated"
EVENT_ACCOUNT_KEY_ADDED = "flow.AccountKeyAdded"
EVENT_ACCOUNT_KEY_REMOVED = "flow.AccountKeyRemoved"
EVENT_ACCOUNT_CONTRACT_ADDED = "flow.AccountContractAdded"
EVENT_ACCOUNT_CONTRACT_UPDATED = "flow.AccountContractUpdated"
EVENT_ACCOUNT_CONTRACT_REMOVED = "flow.AccountContractRemoved"

TOKENS_WITHDRAWN_PATTERN = re.compile(r"A\..*\.FlowToken\.TokensWithdrawn")
TOKENS_DEPOSITED_PATTERN = re.compile(r"A\..*\.FlowToken\.TokensDeposited")

# ========================================================================
# KEYS
# ========================================================================

# Flow protobuf numbering
SIGNATURE_ALGORITHMS = {
    2: "ECDSA_P256",
    3: "ECDSA_secp256k1",
}
HASH_ALGORITHMS = {
    1: "SHA2_256",
    3: "SHA3_256",
}

# ========================================================================
# TRANSACTION STATUS
# ========================================================================

TX_STATUS_UNKNOWN = 0
TX_STATUS_PENDING = 1
TX_STATUS_FINALIZED = 2
TX_STATUS_EXECUTED = 3
TX_STATUS_SEALED = 4
TX_STATUS_EXPIRED = 5

TX_STATUS_CODES = {
    "Unknown": TX_STATUS_UNKNOWN,
    "Pending": TX_STATUS_PENDING,
    "Finalized": TX_STATUS_FINALIZED,
    "Executed": TX_STATUS_EXECUTED,
    "Sealed": TX_STATUS_SEALED,
    "Expired": TX_STATUS_EXPIRED,
}

# Only success (0) and failure (1) are meaningful grpc status codes.
GRPC_STATUS_SUCCESS = 0
GRPC_STATUS_FAILURE = 1
