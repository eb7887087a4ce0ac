"""Unit tests for transaction status subscriptions."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from flowdex.config.constants import (
    TX_STATUS_EXECUTED,
    TX_STATUS_EXPIRED,
    TX_STATUS_PENDING,
    TX_STATUS_SEALED,
)
from flowdex.services.flow_gateway.subscription import TransactionStatusSubscription
from flowdex.utils.exceptions import GatewayError, TransactionExpiredError
from tests.conftest import make_status


def make_subscription(*statuses):
    """Subscription polling a gateway that answers with the given statuses."""
    gateway = MagicMock()
    gateway.get_transaction_status_by_id = AsyncMock(side_effect=list(statuses))
    return TransactionStatusSubscription(gateway, "tx-1", poll_interval=0)


class TestTransactionStatusSubscription:
    """Tests for status polling."""

    @pytest.mark.asyncio
    async def test_resolves_when_sealed(self):
        subscription = make_subscription(
            make_status(status=TX_STATUS_PENDING),
            make_status(status=TX_STATUS_SEALED),
        )

        sealed = await asyncio.wait_for(subscription.once_sealed(), timeout=1)

        assert sealed.status == TX_STATUS_SEALED
        assert subscription.gateway.get_transaction_status_by_id.await_count == 2

    @pytest.mark.asyncio
    async def test_publishes_only_changes(self):
        subscription = make_subscription(
            make_status(status=TX_STATUS_PENDING),
            make_status(status=TX_STATUS_PENDING),
            make_status(status=TX_STATUS_EXECUTED),
            make_status(status=TX_STATUS_SEALED),
        )
        received = []

        async def on_status(status):
            received.append(status.status)

        subscription.on_update(on_status)
        await asyncio.wait_for(subscription.once_sealed(), timeout=1)

        assert received == [TX_STATUS_PENDING, TX_STATUS_EXECUTED, TX_STATUS_SEALED]

    @pytest.mark.asyncio
    async def test_sync_callbacks_are_supported(self):
        subscription = make_subscription(make_status(status=TX_STATUS_SEALED))
        received = []

        subscription.on_update(lambda status: received.append(status.status))
        await asyncio.wait_for(subscription.once_sealed(), timeout=1)

        assert received == [TX_STATUS_SEALED]

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_stop_polling(self):
        subscription = make_subscription(make_status(status=TX_STATUS_SEALED))

        def on_status(status):
            raise ValueError("callback failed")

        subscription.on_update(on_status)
        sealed = await asyncio.wait_for(subscription.once_sealed(), timeout=1)

        assert sealed.status == TX_STATUS_SEALED

    @pytest.mark.asyncio
    async def test_expired_transaction_raises(self):
        subscription = make_subscription(make_status(status=TX_STATUS_EXPIRED))

        with pytest.raises(TransactionExpiredError):
            await asyncio.wait_for(subscription.once_sealed(), timeout=1)

    @pytest.mark.asyncio
    async def test_gateway_error_is_propagated(self):
        subscription = make_subscription(GatewayError("unreachable"))

        with pytest.raises(GatewayError):
            await asyncio.wait_for(subscription.once_sealed(), timeout=1)

    @pytest.mark.asyncio
    async def test_last_unsubscribe_closes_stream(self):
        subscription = make_subscription(
            *[make_status(status=TX_STATUS_PENDING)] * 100
        )
        subscription.poll_interval = 10

        unsubscribe = subscription.on_update(lambda status: None)
        await asyncio.sleep(0)

        unsubscribe()

        assert subscription.closed
        with pytest.raises(asyncio.CancelledError):
            await subscription.once_sealed()
