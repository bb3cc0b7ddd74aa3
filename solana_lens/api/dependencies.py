"""Shared request dependencies"""

import asyncio
from fastapi import Request

from solana_lens.services.analytics_engine import AnalyticsEngine
from solana_lens.services.cache import CacheService
from solana_lens.services.solana_client import SolanaClient


def get_client(request: Request) -> SolanaClient:
    return request.app.state.client


def get_engine(request: Request) -> AnalyticsEngine:
    return request.app.state.engine


def get_snapshot_lock(request: Request) -> asyncio.Lock:
    """Serializes snapshots on the shared engine"""
    return request.app.state.snapshot_lock


def get_cache(request: Request) -> CacheService:
    return request.app.state.cache
