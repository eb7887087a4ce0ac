"""Unit tests for the health check server handlers."""

import json
from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from jobs import health


@pytest.fixture(autouse=True)
def reset_components():
    """Unregister health components after each test."""
    yield
    health.register_components(None, None)


def make_scheduler(running=True):
    """Scheduler mock with a single job."""
    scheduler = MagicMock()
    scheduler.running = running
    scheduler.get_jobs.return_value = [
        SimpleNamespace(
            id="flow_indexer",
            next_run_time=datetime(2026, 10, 17, 10, 0, tzinfo=UTC),
        )
    ]
    return scheduler


def make_indexer():
    """Indexer stand-in exposing the reported progress fields."""
    return SimpleNamespace(
        is_processing=False,
        last_processed_height=42,
        watchers=["tx-1", "tx-2"],
    )


def body(response):
    """Decode a JSON response body."""
    return json.loads(response.text)


class TestHealthHandler:
    """Tests for /health."""

    @pytest.mark.asyncio
    async def test_unregistered_scheduler_is_unhealthy(self):
        response = await health.health_handler(MagicMock())

        assert response.status == 503
        assert body(response)["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_reports_indexer_progress(self):
        health.register_components(make_scheduler(), make_indexer())

        response = await health.health_handler(MagicMock())

        data = body(response)
        assert response.status == 200
        assert data["status"] == "healthy"
        assert data["jobs"][0]["id"] == "flow_indexer"
        assert data["indexer"] == {
            "registered": True,
            "processing": False,
            "last_processed_height": 42,
            "active_watchers": 2,
        }

    @pytest.mark.asyncio
    async def test_stopped_scheduler(self):
        health.register_components(make_scheduler(running=False), None)

        response = await health.health_handler(MagicMock())

        assert response.status == 503
        assert body(response)["indexer"] == {"registered": False}


class TestProbes:
    """Tests for readiness and liveness probes."""

    @pytest.mark.asyncio
    async def test_ready_with_running_scheduler_and_indexer(self):
        health.register_components(make_scheduler(), make_indexer())

        response = await health.readiness_handler(MagicMock())

        assert response.status == 200
        assert body(response)["ready"] is True

    @pytest.mark.asyncio
    async def test_not_ready_without_indexer(self):
        health.register_components(make_scheduler(), None)

        response = await health.readiness_handler(MagicMock())

        assert response.status == 503

    @pytest.mark.asyncio
    async def test_liveness(self):
        response = await health.liveness_handler(MagicMock())

        assert body(response) == {"status": "alive", "alive": True}

    def test_routes(self):
        app = health.create_health_app()

        paths = {route.resource.canonical for route in app.router.routes()}

        assert paths == {"/health", "/readiness", "/liveness"}
