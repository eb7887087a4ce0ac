"""
Flow Indexer Event Dispatch Mixin.

Applies the side effects of classified chain events to the account,
key and contract indexes.
"""

import asyncio
from typing import assert_never

from loguru import logger

from flowdex.services.flow_gateway.types import FlowAccount, FlowEvent
from flowdex.utils.exceptions import EventHandlingError

from .events import (
    AccountContractPayload,
    AccountKeyPayload,
    EventKind,
    TokenMovementPayload,
    classify_event,
)
from .mappers import (
    build_contract_id,
    build_key_id,
    create_account_entity,
    create_contract_entity,
    create_key_entity,
)


class EventDispatchMixin:
    """Mixin providing event side effects."""

    async def process_event(self, event: FlowEvent) -> None:
        """
        Apply one event to the index.

        Raises:
            EventHandlingError: If the event cannot be applied
            GatewayError: If a required account lookup fails
        """
        classified = classify_event(event)
        payload = classified.payload

        match classified.kind:
            case EventKind.ACCOUNT_CREATED:
                await self.process_new_account(payload.address)
            case EventKind.ACCOUNT_KEY_ADDED:
                await self._handle_key_added(payload)
            case EventKind.ACCOUNT_KEY_REMOVED:
                await self._handle_key_removed(payload)
            case EventKind.ACCOUNT_CONTRACT_ADDED | EventKind.ACCOUNT_CONTRACT_UPDATED:
                await self._handle_contract_upserted(payload)
            case EventKind.ACCOUNT_CONTRACT_REMOVED:
                await self._handle_contract_removed(payload)
            case EventKind.TOKENS_WITHDRAWN | EventKind.TOKENS_DEPOSITED:
                await self._handle_token_movement(classified.kind, payload)
            case EventKind.UNKNOWN:
                logger.debug(f"[Indexer] No handler for event {event.type}")
            case _:
                assert_never(classified.kind)

    async def process_new_account(self, address: str) -> FlowAccount:
        """
        Index an account together with its keys and contracts.

        Args:
            address: Prefixed account address

        Returns:
            Account fetched from the chain

        Raises:
            AccountNotFoundError: If the chain has no such account
        """
        account = await self.gateway.get_account(address)

        await self.account_index.upsert(**create_account_entity(account))
        await asyncio.gather(
            *(
                self.key_index.upsert(**create_key_entity(account.address, key))
                for key in account.keys
            ),
            *(
                self.contract_index.upsert(**create_contract_entity(account, name))
                for name in account.contracts
            ),
        )

        logger.debug(
            f"[Indexer] Indexed account {address}: {len(account.keys)} keys, "
            f"{len(account.contracts)} contracts"
        )
        return account

    async def update_account_balance(self, address: str) -> None:
        """Refresh the stored balance of an account."""
        account = await self.gateway.get_account(address)
        await self.account_index.upsert(**create_account_entity(account))

    async def _handle_key_added(self, payload: AccountKeyPayload) -> None:
        account = await self.gateway.get_account(payload.address)

        key = next(
            (key for key in account.keys if key.public_key == payload.public_key),
            None,
        )
        if key is None:
            raise EventHandlingError(
                f"Key {payload.public_key[:16]}... not found on account "
                f"{payload.address}"
            )

        await self.key_index.upsert(**create_key_entity(payload.address, key))

    async def _handle_key_removed(self, payload: AccountKeyPayload) -> None:
        await self.key_index.delete(build_key_id(payload.address, payload.public_key))

    async def _handle_contract_upserted(self, payload: AccountContractPayload) -> None:
        account = await self.gateway.get_account(payload.address)
        try:
            entity = create_contract_entity(account, payload.contract_name)
        except KeyError as e:
            raise EventHandlingError(
                f"Contract {payload.contract_name} not found on account "
                f"{payload.address}"
            ) from e

        await self.contract_index.upsert(**entity)

    async def _handle_contract_removed(self, payload: AccountContractPayload) -> None:
        await self.contract_index.delete(
            build_contract_id(payload.address, payload.contract_name)
        )

    async def _handle_token_movement(
        self, kind: EventKind, payload: TokenMovementPayload
    ) -> None:
        if payload.address is None:
            # Genesis funding has no real counterparty
            logger.debug(f"[Indexer] Skipping {kind.value} without address")
            return
        await self.update_account_balance(payload.address)
