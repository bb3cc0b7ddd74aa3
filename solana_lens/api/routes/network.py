"""Network-level endpoints"""

from fastapi import APIRouter, Depends, Query
import structlog

from solana_lens.api.dependencies import get_cache, get_client
from solana_lens.models.ledger import NetworkStats, SupplyInfo
from solana_lens.services.cache import CacheService
from solana_lens.services.solana_client import SolanaClient
from solana_lens.utils.config import settings

router = APIRouter()
logger = structlog.get_logger()


@router.get("/stats", response_model=NetworkStats)
async def get_network_stats(
    client: SolanaClient = Depends(get_client),
    cache: CacheService = Depends(get_cache)
):
    """
    Current slot, block height, epoch progress, TPS and validator count
    """
    cached = await cache.get("network:stats")
    if cached:
        return NetworkStats(**cached)

    stats = await client.get_network_stats()
    await cache.set("network:stats", stats.model_dump())
    return stats


@router.get("/blocks/recent")
async def get_recent_blocks(
    count: int = Query(default=settings.DEFAULT_BLOCK_WINDOW, ge=1),
    client: SolanaClient = Depends(get_client)
):
    """
    Transaction counts for the most recent blocks
    """
    blocks = await client.get_recent_block_production(min(count, settings.MAX_BLOCK_WINDOW))
    return {"blocks": [b.model_dump() for b in blocks]}


@router.get("/supply", response_model=SupplyInfo)
async def get_supply(
    client: SolanaClient = Depends(get_client),
    cache: CacheService = Depends(get_cache)
):
    """
    SOL supply breakdown
    """
    cached = await cache.get("network:supply")
    if cached:
        return SupplyInfo(**cached)

    supply = await client.get_supply_info()
    await cache.set("network:supply", supply.model_dump())
    return supply
