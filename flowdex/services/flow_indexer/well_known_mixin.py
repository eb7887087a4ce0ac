"""
Flow Indexer Well-Known Accounts Mixin.

Indexes the system accounts that exist before any block creates them.
"""

import asyncio

from loguru import logger

from flowdex.config.constants import WELL_KNOWN_ADDRESSES
from flowdex.utils.exceptions import is_expected_lookup_error


class WellKnownAccountsMixin:
    """Mixin providing well known account bootstrap."""

    well_known_addresses: tuple[str, ...] = WELL_KNOWN_ADDRESSES

    async def maybe_process_well_known_accounts(self) -> None:
        """Index every well known account missing from the account index."""
        existing = await asyncio.gather(
            *(
                self.account_index.find_one_by_id(address)
                for address in self.well_known_addresses
            )
        )
        missing = [
            address
            for address, account in zip(self.well_known_addresses, existing)
            if account is None
        ]
        if not missing:
            return

        await asyncio.gather(*(self._bootstrap_account(address) for address in missing))

    async def _bootstrap_account(self, address: str) -> None:
        try:
            await self.process_new_account(address)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # Each role exists in two address variants; one always 404s
            if is_expected_lookup_error(e):
                return
            logger.error(f"[Indexer] Failed to bootstrap account {address}: {e}")
