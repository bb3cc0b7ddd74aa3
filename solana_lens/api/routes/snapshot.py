"""Snapshot and anomaly endpoints"""

import asyncio
from fastapi import APIRouter, Depends, Query
import structlog

from solana_lens.api.dependencies import get_engine, get_snapshot_lock
from solana_lens.models.analytics import HistoryResponse, NetworkSnapshot
from solana_lens.services.analytics_engine import AnalyticsEngine
from solana_lens.utils.config import settings

router = APIRouter()
logger = structlog.get_logger()


@router.get("/snapshot", response_model=NetworkSnapshot)
async def get_snapshot(
    blocks: int = Query(default=settings.DEFAULT_BLOCK_WINDOW, ge=1),
    engine: AnalyticsEngine = Depends(get_engine),
    lock: asyncio.Lock = Depends(get_snapshot_lock)
):
    """
    Full network snapshot

    - Network statistics
    - Top programs in the sampled blocks
    - Block summary
    - Detected anomalies
    """
    async with lock:
        return await engine.take_snapshot(min(blocks, settings.MAX_BLOCK_WINDOW))


@router.get("/anomalies")
async def get_anomalies(
    engine: AnalyticsEngine = Depends(get_engine),
    lock: asyncio.Lock = Depends(get_snapshot_lock)
):
    """
    Take a fresh snapshot and return only its anomalies
    """
    async with lock:
        snapshot = await engine.take_snapshot(settings.DEFAULT_BLOCK_WINDOW)
        baseline = engine.get_baseline_tps()

    return {
        "anomalies": [a.model_dump(mode="json") for a in snapshot.anomalies],
        "baseline_tps": baseline
    }


@router.get("/history", response_model=HistoryResponse)
async def get_history(engine: AnalyticsEngine = Depends(get_engine)):
    """
    Statistics retained from previous snapshots, oldest first
    """
    return HistoryResponse(
        baseline_tps=engine.get_baseline_tps(),
        known_programs=len(engine.known_programs),
        history=engine.get_history()
    )
