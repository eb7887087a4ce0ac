"""
Transaction status subscription.

Polls the transaction result endpoint and pushes status changes to
registered callbacks until the transaction reaches a terminal state.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from loguru import logger

from flowdex.config.constants import TX_STATUS_EXPIRED, TX_STATUS_SEALED
from flowdex.services.flow_gateway.types import FlowTransactionStatus
from flowdex.utils.exceptions import TransactionExpiredError

if TYPE_CHECKING:
    from flowdex.services.flow_gateway.client import FlowGatewayService

StatusCallback = Callable[[FlowTransactionStatus], Awaitable[None] | None]


class TransactionStatusSubscription:
    """
    Status stream of a single transaction.

    Polling starts lazily on the first on_update() / once_sealed() call and
    stops once the transaction is sealed or expired, on a gateway error, or
    when close() is called.
    """

    def __init__(
        self,
        gateway: "FlowGatewayService",
        transaction_id: str,
        poll_interval: float,
    ) -> None:
        """
        Initialize subscription.

        Args:
            gateway: Gateway used to fetch transaction results
            transaction_id: Watched transaction
            poll_interval: Delay between polls in seconds
        """
        self.gateway = gateway
        self.transaction_id = transaction_id
        self.poll_interval = poll_interval

        self._callbacks: list[StatusCallback] = []
        self._sealed: asyncio.Future[FlowTransactionStatus] | None = None
        self._poller: asyncio.Task | None = None
        self._last_status: tuple[int, int, str] | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        """Check if polling was stopped."""
        return self._closed

    def on_update(self, callback: StatusCallback) -> Callable[[], None]:
        """
        Register a callback for every status change.

        Args:
            callback: Sync or async callable receiving the new status

        Returns:
            Unsubscribe function; the last unsubscribe closes the stream
        """
        self._callbacks.append(callback)
        self._ensure_polling()

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)
            if not self._callbacks:
                self.close()

        return unsubscribe

    async def once_sealed(self) -> FlowTransactionStatus:
        """
        Wait until the transaction is sealed.

        Returns:
            Sealed status

        Raises:
            TransactionExpiredError: If the transaction expired
            GatewayError: If polling failed
        """
        self._ensure_polling()
        return await asyncio.shield(self._sealed_future())

    def close(self) -> None:
        """Stop polling; pending once_sealed() waiters are cancelled."""
        if self._closed:
            return
        self._closed = True
        self._callbacks.clear()
        if self._poller is not None and not self._poller.done():
            self._poller.cancel()
        if self._sealed is not None and not self._sealed.done():
            self._sealed.cancel()

    def _sealed_future(self) -> asyncio.Future[FlowTransactionStatus]:
        if self._sealed is None:
            self._sealed = asyncio.get_running_loop().create_future()
        return self._sealed

    def _ensure_polling(self) -> None:
        if self._closed or self._poller is not None:
            return
        self._sealed_future()
        self._poller = asyncio.create_task(
            self._poll(), name=f"tx-status-{self.transaction_id[:16]}"
        )

    async def _poll(self) -> None:
        sealed = self._sealed_future()
        try:
            while True:
                status = await self.gateway.get_transaction_status_by_id(
                    self.transaction_id
                )
                await self._publish(status)

                if status.status == TX_STATUS_SEALED:
                    sealed.set_result(status)
                    return
                if status.status == TX_STATUS_EXPIRED:
                    sealed.set_exception(
                        TransactionExpiredError(self.transaction_id)
                    )
                    return

                await asyncio.sleep(self.poll_interval)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if not sealed.done():
                sealed.set_exception(e)

    async def _publish(self, status: FlowTransactionStatus) -> None:
        fingerprint = (status.status, status.status_code, status.error_message)
        if fingerprint == self._last_status:
            return
        self._last_status = fingerprint

        for callback in list(self._callbacks):
            try:
                result = callback(status)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(
                    f"[Gateway] Status callback failed for "
                    f"{self.transaction_id[:16]}...: {e}"
                )
