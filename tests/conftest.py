"""Shared fixtures for SolanaLens tests"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from solana_lens.models.ledger import BlockProduction, EpochInfo, NetworkStats


def build_stats(tps: float = 1000.0) -> NetworkStats:
    return NetworkStats(
        current_slot=285_000_000,
        block_height=263_000_000,
        epoch_info=EpochInfo(
            epoch=660,
            slot_index=216_000,
            slots_in_epoch=432_000,
            absolute_slot=285_000_000,
            transaction_count=None,
        ),
        tps=tps,
        validator_count=1450,
    )


def build_block(slot: int, total: int, failed: int = 0) -> BlockProduction:
    return BlockProduction(
        slot=slot,
        num_transactions=total,
        num_successful=total - failed,
        num_failed=failed,
        block_time=1_700_000_000,
    )


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any structlog configuration a test installed"""
    yield
    structlog.reset_defaults()


@pytest.fixture
def make_stats():
    """Factory for NetworkStats with a chosen TPS"""
    return build_stats


@pytest.fixture
def make_block():
    """Factory for BlockProduction records"""
    return build_block


@pytest.fixture
def mock_client():
    """
    SolanaClient stand-in returning a healthy, quiet network

    Tests override the AsyncMock return values per round.
    """
    client = MagicMock()
    client.get_network_stats = AsyncMock(return_value=build_stats(1000.0))
    client.get_recent_block_production = AsyncMock(return_value=[
        build_block(100, 1200, failed=60),
        build_block(99, 1000, failed=40),
    ])
    client.get_top_programs_from_recent_blocks = AsyncMock(return_value={
        "11111111111111111111111111111111": 40,
        "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA": 60,
    })
    return client
