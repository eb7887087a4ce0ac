"""
Exception handling utilities.

Defines categorized exception types for proper error handling.
"""


class FlowdexError(Exception):
    """Base class for indexer errors."""


class GatewayError(FlowdexError):
    """Raised when a gateway request fails."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class GatewayUnavailableError(GatewayError):
    """Raised when the gateway cannot be reached at all."""


class AccountNotFoundError(GatewayError):
    """Raised when the gateway has no account at the requested address."""

    def __init__(self, address: str) -> None:
        super().__init__(f"Account {address} not found", status=404)
        self.address = address


class TransactionExpiredError(GatewayError):
    """Raised when a watched transaction expires before being sealed."""

    def __init__(self, transaction_id: str) -> None:
        super().__init__(f"Transaction {transaction_id} expired before sealing")
        self.transaction_id = transaction_id


class EventHandlingError(FlowdexError):
    """Raised when an event cannot be applied to the index."""


class BlockPersistenceError(FlowdexError):
    """Raised when a block entity cannot be stored; stops the current tick."""

    def __init__(self, height: int, cause: BaseException) -> None:
        super().__init__(f"Failed to store block #{height}: {cause}")
        self.height = height
        self.cause = cause


class ScriptParseError(FlowdexError):
    """Raised when a Cadence script has no parsable interaction."""


# Exception categories based on handling strategy

# Expected during well known account bootstrap - swallowed silently
EXPECTED_LOOKUP_ERRORS = (
    AccountNotFoundError,
)


def is_expected_lookup_error(exc: BaseException) -> bool:
    """
    Check if exception is an expected lookup miss.

    Args:
        exc: Exception to check

    Returns:
        True if exception can be swallowed silently
    """
    return isinstance(exc, EXPECTED_LOOKUP_ERRORS)
