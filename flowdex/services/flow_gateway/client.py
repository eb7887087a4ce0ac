"""
Flow gateway service.

Thin async client for the Flow Access REST API. Converts REST records
into gateway-shaped dataclasses consumed by the indexer.
"""

from typing import Any
from urllib.parse import quote

import aiohttp
from loguru import logger

from flowdex.config.constants import (
    HASH_ALGORITHMS,
    SIGNATURE_ALGORITHMS,
    TX_STATUS_CODES,
    TX_STATUS_UNKNOWN,
)
from flowdex.config.settings import Settings, settings as default_settings
from flowdex.services.flow_gateway.cadence import (
    b64decode_text,
    b64encode_text,
    decode_cadence_value,
    decode_event_payload,
    decode_json_cadence,
)
from flowdex.services.flow_gateway.subscription import TransactionStatusSubscription
from flowdex.services.flow_gateway.types import (
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
from flowdex.utils.exceptions import (
    AccountNotFoundError,
    GatewayError,
    GatewayUnavailableError,
)

_SIGN_ALGO_CODES = {name: code for code, name in SIGNATURE_ALGORITHMS.items()}
_HASH_ALGO_CODES = {name: code for code, name in HASH_ALGORITHMS.items()}


def _algo_code(value: Any, codes: dict[str, int]) -> int:
    """REST reports algorithms by name, older gateways by number."""
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return codes.get(value, -1)


def _strip_hex_prefix(value: str) -> str:
    value = value.lower()
    return value[2:] if value.startswith("0x") else value


class FlowGatewayService:
    """
    Client for the Flow Access REST API.

    Usage:
        gateway = FlowGatewayService(settings)
        block = await gateway.get_latest_block()
        await gateway.close()
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """
        Initialize gateway client.

        Args:
            settings: Application settings (defaults to global settings)
        """
        self.settings = settings or default_settings
        self.base_url = self.settings.flow_gateway_url
        self.timeout = aiohttp.ClientTimeout(total=self.settings.flow_gateway_timeout)
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
    ) -> Any:
        """
        Perform a request and return decoded JSON.

        Raises:
            GatewayUnavailableError: If the gateway cannot be reached
            GatewayError: On non-2xx responses
        """
        url = f"{self.base_url}{path}"
        session = await self._get_session()
        try:
            async with session.request(
                method, url, params=params, json=json_body
            ) as response:
                if response.status >= 400:
                    text = await response.text()
                    raise GatewayError(
                        f"{method} {path} failed: HTTP {response.status} {text[:200]}",
                        status=response.status,
                    )
                return await response.json(content_type=None)
        except (aiohttp.ClientConnectionError, TimeoutError) as e:
            raise GatewayUnavailableError(f"{method} {path} failed: {e}") from e
        except aiohttp.ClientError as e:
            raise GatewayError(f"{method} {path} failed: {e}") from e

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    async def is_reachable(self) -> bool:
        """Check if the gateway answers requests."""
        try:
            await self._request("GET", "/v1/blocks", params={"height": "sealed"})
            return True
        except GatewayError as e:
            logger.debug(f"[Gateway] Unreachable: {e}")
            return False

    async def get_latest_block(self) -> FlowBlock:
        """Get the latest sealed block."""
        return await self._get_single_block({"height": "sealed"})

    async def get_block_by_height(self, height: int) -> FlowBlock:
        """Get block at the given height."""
        return await self._get_single_block({"height": str(height)})

    async def _get_single_block(self, params: dict[str, str]) -> FlowBlock:
        data = await self._request(
            "GET", "/v1/blocks", params={**params, "expand": "payload"}
        )
        if not data:
            raise GatewayError(f"No block returned for {params}")
        return self._parse_block(data[0])

    @staticmethod
    def _parse_block(data: dict[str, Any]) -> FlowBlock:
        header = data.get("header", {})
        payload = data.get("payload") or {}
        return FlowBlock(
            id=header["id"],
            parent_id=header.get("parent_id", ""),
            height=int(header["height"]),
            timestamp=header.get("timestamp", ""),
            collection_guarantees=payload.get("collection_guarantees") or [],
            block_seals=payload.get("block_seals") or [],
            signatures=data.get("signatures"),
        )

    async def get_collection_by_id(self, collection_id: str) -> FlowCollection:
        """Get collection with its transaction ids."""
        data = await self._request("GET", f"/v1/collections/{collection_id}")

        transaction_ids = [tx["id"] for tx in data.get("transactions") or []]
        if not transaction_ids:
            links = (data.get("_expandable") or {}).get("transactions") or []
            transaction_ids = [link.rstrip("/").rsplit("/", 1)[-1] for link in links]

        return FlowCollection(id=data["id"], transaction_ids=transaction_ids)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def get_transaction_by_id(self, transaction_id: str) -> FlowTransaction:
        """Get transaction body."""
        data = await self._request("GET", f"/v1/transactions/{transaction_id}")
        proposal_key = data.get("proposal_key") or {}
        return FlowTransaction(
            id=data["id"],
            script=b64decode_text(data.get("script")),
            args=[decode_json_cadence(arg) for arg in data.get("arguments") or []],
            reference_block_id=data.get("reference_block_id", ""),
            gas_limit=int(data.get("gas_limit", 0)),
            payer=data.get("payer", ""),
            proposal_key=FlowProposalKey(
                address=proposal_key.get("address", ""),
                key_id=int(proposal_key.get("key_index", 0)),
                sequence_number=int(proposal_key.get("sequence_number", 0)),
            ),
            authorizers=list(data.get("authorizers") or []),
            payload_signatures=self._parse_signatures(data.get("payload_signatures")),
            envelope_signatures=self._parse_signatures(
                data.get("envelope_signatures")
            ),
        )

    @staticmethod
    def _parse_signatures(items: list[dict[str, Any]] | None) -> list[FlowSignature]:
        return [
            FlowSignature(
                address=item.get("address", ""),
                key_id=int(item.get("key_index", 0)),
                signature=item.get("signature", ""),
            )
            for item in items or []
        ]

    async def get_transaction_status_by_id(
        self, transaction_id: str
    ) -> FlowTransactionStatus:
        """Get execution result of a transaction, including its events."""
        data = await self._request(
            "GET", f"/v1/transaction_results/{transaction_id}"
        )

        events = []
        for item in data.get("events") or []:
            payload_type, payload = decode_event_payload(item.get("payload", ""))
            events.append(
                FlowEvent(
                    type=item.get("type") or payload_type or "",
                    transaction_id=item.get("transaction_id", transaction_id),
                    transaction_index=int(item.get("transaction_index", 0)),
                    event_index=int(item.get("event_index", 0)),
                    data=payload,
                )
            )

        return FlowTransactionStatus(
            status=TX_STATUS_CODES.get(data.get("status"), TX_STATUS_UNKNOWN),
            status_code=int(data.get("status_code", 0)),
            error_message=data.get("error_message") or "",
            block_id=data.get("block_id"),
            events=events,
        )

    def subscribe_to_transaction_status(
        self, transaction_id: str
    ) -> TransactionStatusSubscription:
        """Open a status stream for a transaction."""
        return TransactionStatusSubscription(
            gateway=self,
            transaction_id=transaction_id,
            poll_interval=self.settings.tx_status_poll_interval,
        )

    # ------------------------------------------------------------------
    # Accounts & scripts
    # ------------------------------------------------------------------

    async def get_account(self, address: str) -> FlowAccount:
        """
        Get account with keys and contracts.

        Raises:
            AccountNotFoundError: If no account exists at the address
        """
        try:
            data = await self._request(
                "GET",
                f"/v1/accounts/{quote(address)}",
                params={"expand": "keys,contracts"},
            )
        except GatewayError as e:
            if e.status in (400, 404):
                raise AccountNotFoundError(address) from e
            raise

        keys = [
            FlowKey(
                index=int(key.get("index", 0)),
                public_key=_strip_hex_prefix(key.get("public_key", "")),
                sign_algo=_algo_code(key.get("signing_algorithm"), _SIGN_ALGO_CODES),
                hash_algo=_algo_code(key.get("hashing_algorithm"), _HASH_ALGO_CODES),
                weight=int(key.get("weight", 0)),
                sequence_number=int(key.get("sequence_number", 0)),
                revoked=bool(key.get("revoked", False)),
            )
            for key in data.get("keys") or []
        ]
        contracts = {
            name: b64decode_text(code)
            for name, code in (data.get("contracts") or {}).items()
        }

        return FlowAccount(
            address=data.get("address", address),
            balance=int(data.get("balance", 0)),
            code=b64decode_text(data.get("code")) or None,
            keys=keys,
            contracts=contracts,
        )

    async def execute_script(
        self, source: str, arguments: list[str] | None = None
    ) -> Any:
        """
        Execute a read-only Cadence script at the latest sealed block.

        Args:
            source: Cadence source
            arguments: Base64 JSON-Cadence encoded arguments

        Returns:
            Decoded script result
        """
        data = await self._request(
            "POST",
            "/v1/scripts",
            params={"block_height": "sealed"},
            json_body={
                "script": b64encode_text(source),
                "arguments": arguments or [],
            },
        )
        return decode_cadence_value(decode_json_cadence(data))
