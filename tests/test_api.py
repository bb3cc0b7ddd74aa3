"""Tests for the HTTP API"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from solana_lens.api.dependencies import get_cache, get_client, get_engine, get_snapshot_lock
from solana_lens.api.main import create_app
from solana_lens.models.ledger import AccountActivity, ProgramInvocation, SupplyInfo
from solana_lens.services.analytics_engine import AnalyticsEngine
from solana_lens.services.solana_client import SolanaRpcError, SourceUnavailableError


@pytest.fixture
def cache():
    """Cache that always misses"""
    cache = MagicMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock(return_value=True)
    return cache


@pytest.fixture
def engine(mock_client):
    return AnalyticsEngine(mock_client)


@pytest.fixture
def api(mock_client, engine, cache):
    """FastAPI TestClient with the RPC layer mocked out"""
    app = create_app()
    lock = asyncio.Lock()
    app.dependency_overrides[get_client] = lambda: mock_client
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_snapshot_lock] = lambda: lock
    return TestClient(app)


class TestHealth:
    """Test health endpoints"""

    def test_root(self, api):
        """Test service banner"""
        response = api.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "operational"

    def test_health(self, api):
        """Test basic health check"""
        assert api.get("/health").json()["status"] == "healthy"

    def test_detailed_health_degraded(self, api, mock_client):
        """Test an unhealthy node degrades overall status"""
        mock_client.get_health = AsyncMock(return_value={"healthy": False, "status": "error"})
        body = api.get("/health/detailed").json()

        assert body["status"] == "degraded"
        assert body["components"]["rpc"]["healthy"] is False


class TestSnapshotEndpoints:
    """Test snapshot, anomaly and history endpoints"""

    def test_snapshot(self, api, mock_client):
        """Test the snapshot body and the clamped window"""
        response = api.get("/api/snapshot", params={"blocks": 50})

        assert response.status_code == 200
        body = response.json()
        assert body["block_summary"]["total_transactions"] == 2200
        assert body["top_programs"][0]["label"] == "Token Program"
        assert body["anomalies"] == []
        mock_client.get_recent_block_production.assert_awaited_once_with(20)

    def test_snapshot_rejects_zero_blocks(self, api):
        """Test the window must be positive"""
        assert api.get("/api/snapshot", params={"blocks": 0}).status_code == 422

    def test_anomalies_include_baseline(self, api, mock_client):
        """Test anomalies endpoint reports the updated baseline"""
        mock_client.get_recent_block_production.return_value = []
        body = api.get("/api/anomalies").json()

        assert body["anomalies"] == []
        assert body["baseline_tps"] == 1000

    def test_history(self, api):
        """Test history grows with every snapshot"""
        api.get("/api/snapshot")
        api.get("/api/snapshot")
        body = api.get("/api/history").json()

        assert len(body["history"]) == 2
        assert body["baseline_tps"] == 1000
        assert body["known_programs"] == 2

    def test_source_unavailable_maps_to_503(self, api, mock_client):
        """Test an unreachable node surfaces as 503"""
        mock_client.get_network_stats = AsyncMock(side_effect=SourceUnavailableError("getSlot failed"))
        response = api.get("/api/snapshot")

        assert response.status_code == 503
        assert "getSlot failed" in response.json()["detail"]

    def test_rpc_error_maps_to_502(self, api, mock_client):
        """Test a node-side error surfaces as 502"""
        mock_client.get_network_stats = AsyncMock(side_effect=SolanaRpcError("Node is behind", code=-32005))
        assert api.get("/api/snapshot").status_code == 502


class TestNetworkEndpoints:
    """Test stats, blocks and supply"""

    def test_stats_cached_after_fetch(self, api, cache):
        """Test stats are fetched on a miss and stored"""
        response = api.get("/api/stats")

        assert response.status_code == 200
        assert response.json()["tps"] == 1000
        cache.set.assert_awaited_once()
        assert cache.set.call_args.args[0] == "network:stats"

    def test_stats_served_from_cache(self, api, cache, mock_client, make_stats):
        """Test a cache hit skips the RPC call"""
        cache.get = AsyncMock(return_value=make_stats(4242).model_dump())
        response = api.get("/api/stats")

        assert response.json()["tps"] == 4242
        mock_client.get_network_stats.assert_not_awaited()

    def test_recent_blocks(self, api):
        """Test recent block listing"""
        blocks = api.get("/api/blocks/recent", params={"count": 2}).json()["blocks"]
        assert [b["slot"] for b in blocks] == [100, 99]

    def test_supply(self, api, mock_client):
        """Test supply endpoint"""
        mock_client.get_supply_info = AsyncMock(return_value=SupplyInfo(total=580e6, circulating=470e6, non_circulating=110e6))
        assert api.get("/api/supply").json()["circulating"] == 470e6


class TestProgramEndpoints:
    """Test program endpoints"""

    def test_top_programs(self, api):
        """Test ranking with totals"""
        body = api.get("/api/programs/top").json()

        assert body["total_invocations"] == 100
        assert body["programs"][0]["share"] == pytest.approx(60.0)

    def test_known_programs(self, api):
        """Test label directory listing"""
        programs = api.get("/api/programs/known").json()["programs"]
        system = next(p for p in programs if p["program_id"] == "11111111111111111111111111111111")
        assert system == {"program_id": "11111111111111111111111111111111", "label": "System Program", "category": "Core"}

    def test_program_activity_limit_clamped(self, api, mock_client):
        """Test activity lookups are capped"""
        mock_client.get_program_activity = AsyncMock(return_value=[
            ProgramInvocation(signature="sig", program_id="JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4", slot=1, fee=0.000005, success=True),
        ])
        body = api.get(
            "/api/programs/JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4/activity",
            params={"limit": 500}
        ).json()

        assert body["label"] == "Jupiter v6"
        assert len(body["invocations"]) == 1
        mock_client.get_program_activity.assert_awaited_once_with(
            "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4", 100
        )


class TestAccountEndpoints:
    """Test account lookup"""

    def test_account_found(self, api, mock_client):
        """Test account lookup"""
        mock_client.get_account_info = AsyncMock(return_value=AccountActivity(
            address="Acct", lamports=10, owner="11111111111111111111111111111111", executable=False, data_size=0
        ))
        assert api.get("/api/accounts/Acct").json()["lamports"] == 10

    def test_account_not_found(self, api, mock_client):
        """Test missing accounts are 404"""
        mock_client.get_account_info = AsyncMock(return_value=None)
        assert api.get("/api/accounts/Acct").status_code == 404
